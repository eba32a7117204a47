"""Unit tests for the demo identity provider."""

import pytest

from imagen_studio.core.auth import DemoIdentityProvider, ProviderKind, User
from imagen_studio.core.errors import AuthError


class TestDemoIdentityProvider:
    """Tests for DemoIdentityProvider.authenticate."""

    @pytest.mark.asyncio
    async def test_google_identity(self, recording_sleep):
        provider = DemoIdentityProvider(delay=1.5, sleep=recording_sleep)

        user = await provider.authenticate("google")

        assert user == User(
            email="demo.user@gmail.com",
            name="Demo User",
            provider=ProviderKind.GOOGLE,
        )
        assert user.is_authenticated
        assert recording_sleep.delays == [1.5]

    @pytest.mark.asyncio
    async def test_linkedin_identity(self, recording_sleep):
        provider = DemoIdentityProvider(sleep=recording_sleep)

        user = await provider.authenticate(ProviderKind.LINKEDIN)

        assert user.email == "user.professional@linkedin.com"
        assert user.name == "Professional User"

    @pytest.mark.asyncio
    async def test_unknown_provider(self, recording_sleep):
        """Test that unsupported providers fail without waiting."""
        provider = DemoIdentityProvider(sleep=recording_sleep)

        with pytest.raises(AuthError, match="Unsupported identity provider: github"):
            await provider.authenticate("github")
        assert recording_sleep.delays == []

    @pytest.mark.asyncio
    async def test_zero_delay_skips_sleep(self, recording_sleep):
        provider = DemoIdentityProvider(delay=0, sleep=recording_sleep)
        await provider.authenticate("google")
        assert recording_sleep.delays == []


class TestUser:
    def test_to_dict(self):
        user = User(email="a@b.c", name="A", provider=ProviderKind.GOOGLE)
        assert user.to_dict() == {
            "email": "a@b.c",
            "name": "A",
            "provider": "google",
            "is_authenticated": True,
        }
