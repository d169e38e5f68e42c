from klass_hero.repositories.enrollment.booking_counter_repository import BookingCounterRepository
from klass_hero.repositories.enrollment.enrollment_repository import EnrollmentRepository

__all__ = ["BookingCounterRepository", "EnrollmentRepository"]
