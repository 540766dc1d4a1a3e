"""
AppBackend — Device Enrollment
===============================

What:  Post-action of UserEnd creation. Mints the long-lived device credential
       and seeds the new device's mirror tables.
How:   1. Sign {"userID", "userEndID"} with the injected signer, no expiry.
       2. Put the token in the `x-sgl-token` response header.
       3. Run FanoutReplicator.snapshot synchronously.

Failure modes:
    Signing fails  → InternalError; nothing else runs.
    Snapshot fails → the error propagates, but the header is already set and
                     the UserEnd row already committed: the pipeline reports a
                     PostActionError that still carries the credential.
"""

import logging

from appbackend.security import TOKEN_HEADER, CredentialSigner
from appbackend.services.fanout import FanoutReplicator

logger = logging.getLogger(__name__)


class DeviceEnrollment:
    __name__ = "device_enrollment"

    def __init__(self, signer: CredentialSigner, replicator: FanoutReplicator):
        self.signer = signer
        self.replicator = replicator

    async def __call__(self, ctx) -> None:
        user_id = ctx.obj.user_id
        userend_id = ctx.inserted_id

        token = self.signer.sign({
            "userID": str(user_id),
            "userEndID": str(userend_id),
        })
        ctx.headers[TOKEN_HEADER] = token
        logger.info("Enrolled userend %s for user %s", userend_id, user_id)

        await self.replicator.snapshot(ctx.db, user_id, userend_id)
