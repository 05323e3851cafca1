"""Tests that the concrete classes satisfy the module protocols."""

from unittest.mock import MagicMock

from modules.auth import IAuthService, ITokenSigner
from modules.auth.signing import JWTSigner
from modules.users import IUserStore


class TestProtocols:

    def test_auth_service_implements_interface(self, auth_service):
        assert isinstance(auth_service, IAuthService)

    def test_jwt_signer_implements_interface(self):
        assert isinstance(JWTSigner(), ITokenSigner)

    def test_in_memory_store_implements_interface(self, user_store):
        assert isinstance(user_store, IUserStore)

    def test_supabase_repository_implements_interface(self):
        from modules.users.repository import SupabaseUserRepository

        assert isinstance(SupabaseUserRepository(MagicMock()), IUserStore)

    def test_plain_object_does_not(self):
        assert not isinstance(object(), IAuthService)
        assert not isinstance(object(), ITokenSigner)
