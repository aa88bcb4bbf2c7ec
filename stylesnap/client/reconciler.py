"""Trial identity reconciliation across the client stores and the server

Local storage is authoritative: when the two client copies disagree the
embedded copy is overwritten and its identity is dropped on the server.
"""
import logging
import uuid
from dataclasses import dataclass
from typing import Optional

import httpx

from stylesnap.client.api_client import ApiError, StyleSnapApiClient
from stylesnap.client.storage import EmbeddedStore, LocalStorage

logger = logging.getLogger(__name__)

TRIAL_ID_KEY = "trialId"


@dataclass(frozen=True)
class TrialIdResolution:
    trial_id: str
    discarded: Optional[str]
    source: str
    needs_local_write: bool
    needs_embedded_write: bool


def merge_trial_ids(
    local: Optional[str],
    embedded: Optional[str],
    cookie: Optional[str] = None,
) -> TrialIdResolution:
    """
    Decide which identity the browser keeps.

    source is one of "both", "local", "embedded", "cookie" or "new".

    Precedence: both equal, then local (overwriting a differing embedded
    copy, which is discarded), then embedded, then a fresh UUID. Adopting
    the cookie value is an extension on top of that order: it applies only
    when the caller passes *cookie* and neither client store has an id, so
    the row the edge seeder created is reused instead of orphaned. Callers
    that cannot read the cookie pass None and always mint a fresh id.
    """
    local = local or None
    embedded = embedded or None

    if local and embedded:
        if local == embedded:
            return TrialIdResolution(local, None, "both", False, False)
        return TrialIdResolution(local, embedded, "local", False, True)

    if local:
        return TrialIdResolution(local, None, "local", False, True)

    if embedded:
        # Rewrite the embedded copy too, in case it was stored in another shape
        return TrialIdResolution(embedded, None, "embedded", True, True)

    if cookie:
        return TrialIdResolution(cookie, None, "cookie", True, True)

    return TrialIdResolution(str(uuid.uuid4()), None, "new", True, True)


class TrialIdReconciler:
    """Applies a TrialIdResolution to the stores and syncs it with the server"""

    def __init__(
        self,
        local: LocalStorage,
        embedded: EmbeddedStore,
        api: StyleSnapApiClient,
        cookie: Optional[str] = None,
    ):
        self.local = local
        self.embedded = embedded
        self.api = api
        self.cookie = cookie

    async def ensure_trial_id(self) -> Optional[str]:
        """
        Resolve, persist and register the browser's trial identity.
        Returns None when no store can hold the identity.
        """
        try:
            resolution = merge_trial_ids(
                self.local.get(TRIAL_ID_KEY),
                self.embedded.get(TRIAL_ID_KEY),
                self.cookie,
            )
        except Exception as e:
            logger.error(f"Trial identity resolution failed: {str(e)}", exc_info=True)
            return None

        trial_id = resolution.trial_id
        if resolution.discarded:
            logger.warning(
                f"trialId mismatch between local storage and embedded store, keeping local value {trial_id}"
            )
        if resolution.needs_local_write:
            self.local.set(TRIAL_ID_KEY, trial_id)
        if resolution.needs_embedded_write:
            self.embedded.set(TRIAL_ID_KEY, trial_id)

        # Self-heal whichever copy still disagrees
        local_ok = self.local.get(TRIAL_ID_KEY) == trial_id or self.local.set(TRIAL_ID_KEY, trial_id)
        embedded_ok = self.embedded.get(TRIAL_ID_KEY) == trial_id or self.embedded.set(TRIAL_ID_KEY, trial_id)
        if not local_ok and not embedded_ok:
            logger.error(f"Could not persist trial identity {trial_id} in any client store")
            return None

        if resolution.discarded and resolution.discarded != trial_id:
            try:
                await self.api.delete_trial(resolution.discarded)
            except (ApiError, httpx.HTTPError) as e:
                logger.warning(f"Failed to delete old trialId {resolution.discarded} from server: {str(e)}")

        try:
            await self.api.register_trial(trial_id)
        except (ApiError, httpx.HTTPError) as e:
            logger.warning(f"Failed to sync trialId {trial_id} to server: {str(e)}")

        return trial_id
