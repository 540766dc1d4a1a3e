"""
AppBackend — Identity and Credential Tests
===========================================

What we test:
    ✅ User and device credentials resolve to an Identity
    ✅ Bad signatures, expired tokens and missing claims are rejected
    ✅ Unknown users and foreign device ids are rejected
    ✅ The signer refuses to work without a secret
"""

import uuid
from datetime import timedelta

import jwt
import pytest

from appbackend.exceptions import AuthenticationError, InternalError
from appbackend.security import CredentialSigner, hash_password, verify_password
from appbackend.services.identity import resolve_identity


class TestResolveIdentity:

    @pytest.mark.asyncio
    async def test_user_credential(self, db_session, make_user, signer):
        alice = await make_user("alice")
        token = signer.sign({"userID": str(alice.id)}, expires_in=timedelta(hours=1))

        identity = await resolve_identity(db_session, signer, token)

        assert identity.user_id == alice.id
        assert identity.userend_id is None

    @pytest.mark.asyncio
    async def test_device_credential(self, db_session, make_user, make_userend, signer):
        alice = await make_user("alice")
        device = await make_userend(alice)
        token = signer.sign({"userID": str(alice.id), "userEndID": str(device.id)})

        identity = await resolve_identity(db_session, signer, token)

        assert identity.userend_id == device.id

    @pytest.mark.asyncio
    async def test_wrong_secret(self, db_session, make_user):
        alice = await make_user("alice")
        token = CredentialSigner("another-secret-entirely-0123456789").sign(
            {"userID": str(alice.id)}
        )
        with pytest.raises(AuthenticationError, match="Invalid token"):
            await resolve_identity(db_session, CredentialSigner("x" * 40), token)

    @pytest.mark.asyncio
    async def test_expired_token(self, db_session, make_user, signer):
        alice = await make_user("alice")
        token = signer.sign({"userID": str(alice.id)}, expires_in=timedelta(seconds=-10))
        with pytest.raises(AuthenticationError):
            await resolve_identity(db_session, signer, token)

    @pytest.mark.asyncio
    async def test_garbage_token(self, db_session, signer):
        with pytest.raises(AuthenticationError):
            await resolve_identity(db_session, signer, "not.a.token")

    @pytest.mark.asyncio
    async def test_missing_user_claim(self, db_session, signer):
        token = signer.sign({"userEndID": str(uuid.uuid4())})
        with pytest.raises(AuthenticationError, match="payload"):
            await resolve_identity(db_session, signer, token)

    @pytest.mark.asyncio
    async def test_malformed_user_claim(self, db_session, signer):
        token = signer.sign({"userID": "42"})
        with pytest.raises(AuthenticationError, match="payload"):
            await resolve_identity(db_session, signer, token)

    @pytest.mark.asyncio
    async def test_unknown_user(self, db_session, signer):
        token = signer.sign({"userID": str(uuid.uuid4())})
        with pytest.raises(AuthenticationError, match="User not found"):
            await resolve_identity(db_session, signer, token)

    @pytest.mark.asyncio
    async def test_device_of_another_user(self, db_session, make_user, make_userend, signer):
        alice = await make_user("alice")
        bob = await make_user("bob")
        bobs_device = await make_userend(bob)
        token = signer.sign({"userID": str(alice.id), "userEndID": str(bobs_device.id)})

        with pytest.raises(AuthenticationError, match="device"):
            await resolve_identity(db_session, signer, token)


class TestCredentialSigner:

    def test_sign_without_secret(self):
        with pytest.raises(InternalError):
            CredentialSigner("").sign({"userID": "x"})

    def test_decode_without_secret(self):
        with pytest.raises(jwt.PyJWTError):
            CredentialSigner("").decode("a.b.c")

    def test_expiry_is_added_only_when_requested(self, signer):
        assert "exp" not in signer.decode(signer.sign({"userID": "x"}))
        assert "exp" in signer.decode(signer.sign({"userID": "x"}, expires_in=timedelta(hours=1)))


class TestPasswordHashing:

    def test_hash_verifies(self):
        hashed = hash_password("s3cret")
        assert hashed != "s3cret"
        assert verify_password("s3cret", hashed)
        assert not verify_password("S3cret", hashed)
