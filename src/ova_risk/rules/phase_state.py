from src.ova_common.errors import PhaseNotFoundError, PhaseSettledError
from src.ova_phase.domain.models import Phase


def check_phase_unsettled(phase: Phase | None, phase_id: str) -> Phase:
    """Limit edits and excess clearing are refused once a phase is settled."""
    if phase is None:
        raise PhaseNotFoundError(phase_id)
    if phase.settled:
        raise PhaseSettledError(phase_id)
    return phase
