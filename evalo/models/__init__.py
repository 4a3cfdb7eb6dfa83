from evalo.models.profile import Profile, ProfileRole
from evalo.models.course import Course
from evalo.models.event import Event, EventStatus
from evalo.models.feedback import Feedback, Tone
