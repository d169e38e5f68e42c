from klass_hero.models.enrollment.booking_counter import BookingCounter
from klass_hero.models.enrollment.enrollment import Enrollment
from klass_hero.models.enrollment.enrollment_policy import UNLIMITED, EnrollmentPolicy
from klass_hero.models.enrollment.participant_policy import ParticipantPolicy

__all__ = ["BookingCounter", "Enrollment", "EnrollmentPolicy", "ParticipantPolicy", "UNLIMITED"]
