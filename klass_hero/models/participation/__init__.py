from klass_hero.models.participation.behavioral_note import BehavioralNote
from klass_hero.models.participation.participation_record import ParticipationRecord
from klass_hero.models.participation.program_session import ProgramSession

__all__ = ["BehavioralNote", "ParticipationRecord", "ProgramSession"]
