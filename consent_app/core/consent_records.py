"""Revocation of previously granted consent."""
from __future__ import annotations
import logging
from typing import Callable, Iterable, Optional

from .backend import ConsentBackendClient, ConsentBackendError, ConsentServiceError
from .consent_engine import CONNECTION_FAILED_MESSAGE
from .models import ConsentRecord, RevokeOutcome

REVOKED_MESSAGE = "Successfully revoked"

logger = logging.getLogger(__name__)


class ConsentRecordManager:
    """Revoke consent records through the consent service.

    The table of records is supplied by the caller and never edited here:
    after a successful revoke the caller reloads it via ``on_refresh``.
    """

    def __init__(
        self,
        backend: ConsentBackendClient,
        records: Iterable[ConsentRecord] = (),
        on_refresh: Optional[Callable[[], None]] = None,
    ):
        self.backend = backend
        self.records: list[ConsentRecord] = list(records)
        self.on_refresh = on_refresh

    def find(self, application_id: str) -> Optional[ConsentRecord]:
        for record in self.records:
            if record.application == application_id:
                return record
        return None

    def revoke(self, record: ConsentRecord, scope_to_revoke: Optional[str] = None) -> RevokeOutcome:
        """Revoke one scope of ``record``, or all of it when no scope is given.

        Args:
            record: Consent record of one application
            scope_to_revoke: Single scope to revoke (optional)

        Returns:
            RevokeOutcome; ``refresh`` is True only on success
        """
        scopes = [scope_to_revoke] if scope_to_revoke else list(record.granted_scopes)
        request = ConsentRecord(application=record.application, granted_scopes=scopes)

        try:
            self.backend.revoke_consent(request)
        except ConsentServiceError as exc:
            logger.warning(f"Revoke rejected | application={record.application} | error={exc.message}")
            return RevokeOutcome(success=False, message=exc.message, application=record.application)
        except ConsentBackendError as exc:
            logger.error(f"Revoke failed | application={record.application} | error={exc}")
            return RevokeOutcome(
                success=False,
                message=f"{CONNECTION_FAILED_MESSAGE}: {exc}",
                application=record.application,
            )

        logger.info(f"Consent revoked | application={record.application} | scopes={' '.join(scopes)}")
        if self.on_refresh is not None:
            self.on_refresh()
        return RevokeOutcome(
            success=True,
            message=REVOKED_MESSAGE,
            refresh=True,
            revoked_scopes=tuple(scopes),
            application=record.application,
        )
