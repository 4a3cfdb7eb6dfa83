# Import all the models, so that Base has them before being
# imported by Alembic
from evalo.db.base_class import Base
from evalo.models.profile import Profile
from evalo.models.course import Course
from evalo.models.event import Event
from evalo.models.feedback import Feedback
