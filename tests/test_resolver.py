"""Tests for recipient resolution."""

import httpx
import pytest

from tipjar.core.exceptions import (
    ConfigurationError,
    InvalidInputError,
    NetworkFailureError,
)
from tipjar.core.models import IdentityProfile, ResolutionResult
from tipjar.core.types import ErrorKind, ResolutionKind
from tipjar.providers.identity import NeynarIdentityProvider
from tipjar.resolution import RecipientResolver, ResolutionStrategy


def make_resolver(name_service, identity) -> RecipientResolver:
    return RecipientResolver(name_service=name_service, identity=identity)


class TestLiteralAddress:
    """Typed addresses resolve locally."""

    @pytest.mark.asyncio
    async def test_checksum_and_lowercase_forms(
        self, vitalik, name_service_factory, identity_factory
    ):
        """Both checksummed and lower-case input normalize to checksum form."""
        names, identity = name_service_factory(), identity_factory()
        resolver = make_resolver(names, identity)

        for typed in (vitalik, vitalik.lower(), f"  {vitalik}  "):
            result = await resolver.resolve(typed)
            assert result.address == vitalik
            assert result.kind == ResolutionKind.LITERAL_ADDRESS
            assert result.error is None

        assert names.calls == []
        assert identity.calls == []

    @pytest.mark.asyncio
    async def test_burn_address(self, burn_address, name_service_factory, identity_factory):
        """The burn address resolves to its checksum form with no error."""
        resolver = make_resolver(name_service_factory(), identity_factory())

        result = await resolver.resolve(burn_address.lower())

        assert result.address == "0x000000000000000000000000000000000000dEaD"
        assert result.kind == ResolutionKind.LITERAL_ADDRESS
        assert result.error is None

    @pytest.mark.asyncio
    async def test_bad_checksum_never_reaches_network(
        self, vitalik, name_service_factory, identity_factory
    ):
        """Mixed case with a wrong checksum is rejected without a lookup."""
        names, identity = name_service_factory(), identity_factory()
        resolver = make_resolver(names, identity)
        broken = "0x" + vitalik[2:].swapcase()

        result = await resolver.resolve(broken)

        assert result.address is None
        assert result.error == "invalid address"
        assert result.error_kind == ErrorKind.INVALID_INPUT
        assert names.calls == []
        assert identity.calls == []

    @pytest.mark.asyncio
    async def test_short_hex_is_not_an_address(self, name_service_factory, identity_factory):
        """A 38-digit hex string is treated as a handle, not as an address."""
        identity = identity_factory()
        resolver = make_resolver(name_service_factory(), identity)

        result = await resolver.resolve("0x0000000000000000000000000000000000dEaD")

        assert result.address is None
        assert result.kind == ResolutionKind.SOCIAL_IDENTITY
        assert result.error == "user not found"
        assert identity.calls == ["0x0000000000000000000000000000000000dead"]

    @pytest.mark.asyncio
    async def test_hex_only_handles_reach_directory(
        self, vitalik, name_service_factory, identity_factory
    ):
        """Usernames made only of hex characters are looked up."""
        profiles = {
            handle: IdentityProfile(username=handle, verified_addresses=[vitalik])
            for handle in ("0xdead", "0xcafe", "0xbeef")
        }
        identity = identity_factory(profiles)
        resolver = make_resolver(name_service_factory(), identity)

        for handle in ("0xdead", "@0xCAFE", "0xbeef"):
            result = await resolver.resolve(handle)
            assert result.address == vitalik, handle
            assert result.kind == ResolutionKind.SOCIAL_IDENTITY

        assert identity.calls == ["0xdead", "0xcafe", "0xbeef"]


class TestNameService:
    """Basename resolution."""

    @pytest.mark.asyncio
    async def test_registered_name(self, vitalik, name_service_factory, identity_factory):
        """A registered name resolves to its address."""
        names = name_service_factory({"vitalik.base.eth": vitalik.lower()})
        resolver = make_resolver(names, identity_factory())

        result = await resolver.resolve("Vitalik.Base.eth")

        assert result.address == vitalik
        assert result.kind == ResolutionKind.NAME_SERVICE
        assert names.calls == ["vitalik.base.eth"]

    @pytest.mark.asyncio
    async def test_unregistered_names(self, name_service_factory, identity_factory):
        """Unregistered names report "not found"."""
        resolver = make_resolver(name_service_factory(), identity_factory())

        for name in ("nobody.base.eth", "ghost.base.eth", "x1.base.eth"):
            result = await resolver.resolve(name)
            assert result.error == "not found"
            assert result.address is None
            assert result.kind == ResolutionKind.NAME_SERVICE
            assert result.error_kind == ErrorKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_malformed_name(self, name_service_factory, identity_factory):
        """Provider-side validation failures are reported as invalid names."""
        names = name_service_factory(error=InvalidInputError("name", ".base.eth", "invalid name"))
        resolver = make_resolver(names, identity_factory())

        result = await resolver.resolve(".base.eth")

        assert result.error == "invalid name"
        assert result.kind == ResolutionKind.NAME_SERVICE

    @pytest.mark.asyncio
    async def test_query_failure(self, name_service_factory, identity_factory):
        """RPC failures surface as a lookup failure, not an exception."""
        names = name_service_factory(error=NetworkFailureError("basenames", "timeout"))
        resolver = make_resolver(names, identity_factory())

        result = await resolver.resolve("vitalik.base.eth")

        assert result.error == "name lookup failed"
        assert result.error_kind == ErrorKind.NETWORK_FAILURE
        assert result.kind == ResolutionKind.NAME_SERVICE


class TestSocialIdentity:
    """Farcaster handle resolution."""

    @pytest.mark.asyncio
    async def test_profile_with_verified_address(
        self, vitalik, sample_profile, name_service_factory, identity_factory
    ):
        """First verified address is used, with avatar and display name."""
        identity = identity_factory({"someuser": sample_profile})
        resolver = make_resolver(name_service_factory(), identity)

        result = await resolver.resolve("@SomeUser")

        assert result.address == vitalik
        assert result.kind == ResolutionKind.SOCIAL_IDENTITY
        assert result.display_name == "Some User"
        assert result.avatar_url == "https://example.com/pfp.png"
        assert identity.calls == ["someuser"]

    @pytest.mark.asyncio
    async def test_display_name_falls_back_to_username(
        self, vitalik, name_service_factory, identity_factory
    ):
        """Profiles without a display name show the username."""
        profile = IdentityProfile(username="plain", verified_addresses=[vitalik])
        resolver = make_resolver(name_service_factory(), identity_factory({"plain": profile}))

        result = await resolver.resolve("plain")

        assert result.display_name == "plain"

    @pytest.mark.asyncio
    async def test_no_verified_address(self, name_service_factory, identity_factory):
        """A profile without verified addresses is an error."""
        profile = IdentityProfile(username="someuser", verified_addresses=[])
        resolver = make_resolver(name_service_factory(), identity_factory({"someuser": profile}))

        result = await resolver.resolve("@someuser")

        assert result.error == "no verified address"
        assert result.address is None
        assert result.error_kind == ErrorKind.UNVERIFIED

    @pytest.mark.asyncio
    async def test_unknown_user(self, name_service_factory, identity_factory):
        resolver = make_resolver(name_service_factory(), identity_factory())

        result = await resolver.resolve("@nobody")

        assert "not found" in result.error
        assert result.kind == ResolutionKind.SOCIAL_IDENTITY

    @pytest.mark.asyncio
    async def test_network_failure(self, name_service_factory, identity_factory):
        identity = identity_factory(error=NetworkFailureError("neynar", "HTTP 503", status_code=503))
        resolver = make_resolver(name_service_factory(), identity)

        result = await resolver.resolve("someone")

        assert result.error == "resolution failed"
        assert result.error_kind == ErrorKind.NETWORK_FAILURE

    @pytest.mark.asyncio
    async def test_missing_api_key(self, name_service_factory, identity_factory):
        """Without an API key the lookup is disabled with an explicit error."""
        identity = identity_factory(error=ConfigurationError("NEYNAR_API_KEY", "missing"))
        resolver = make_resolver(name_service_factory(), identity)

        result = await resolver.resolve("someone")

        assert result.error == "identity lookup not configured"
        assert result.error_kind == ErrorKind.CONFIGURATION

    @pytest.mark.asyncio
    async def test_bare_at_sign(self, name_service_factory, identity_factory):
        identity = identity_factory()
        resolver = make_resolver(name_service_factory(), identity)

        result = await resolver.resolve("@")

        assert result.error == "invalid username"
        assert identity.calls == []

    @pytest.mark.asyncio
    async def test_http_404_through_real_provider(
        self, name_service_factory, mock_http_client
    ):
        """A directory 404 becomes "user not found"."""
        client = mock_http_client(lambda request: httpx.Response(404, json={}))
        identity = NeynarIdentityProvider(api_key="test-key", client=client)
        resolver = make_resolver(name_service_factory(), identity)

        result = await resolver.resolve("@missing")

        assert result.error == "user not found"
        assert "not found" in result.error

    @pytest.mark.asyncio
    async def test_unverified_through_real_provider(
        self, name_service_factory, mock_http_client
    ):
        """Directory profile with an empty eth_addresses list."""
        payload = {
            "user": {
                "username": "someuser",
                "display_name": "Some User",
                "pfp_url": None,
                "verified_addresses": {"eth_addresses": []},
            }
        }
        client = mock_http_client(lambda request: httpx.Response(200, json=payload))
        identity = NeynarIdentityProvider(api_key="test-key", client=client)
        resolver = make_resolver(name_service_factory(), identity)

        result = await resolver.resolve("@someuser")

        assert result.error == "no verified address"


class TestResolverContract:
    """Behaviour shared by every input."""

    @pytest.mark.asyncio
    async def test_empty_input(self, name_service_factory, identity_factory):
        """Empty input is "no input yet", without any lookup."""
        names, identity = name_service_factory(), identity_factory()
        resolver = make_resolver(names, identity)

        for blank in ("", "   "):
            result = await resolver.resolve(blank)
            assert result.is_empty
            assert result.kind == ResolutionKind.UNRESOLVED

        assert names.calls == []
        assert identity.calls == []

    @pytest.mark.asyncio
    async def test_crashing_strategy_is_contained(self):
        """Unexpected exceptions never escape resolve()."""

        async def explode(text: str) -> ResolutionResult:
            raise RuntimeError("boom")

        resolver = RecipientResolver(
            strategies=[
                ResolutionStrategy(
                    name="explodes",
                    kind=ResolutionKind.SOCIAL_IDENTITY,
                    matches=lambda text: True,
                    resolve=explode,
                )
            ]
        )

        result = await resolver.resolve("anything")

        assert result.error == "resolution failed"
        assert result.kind == ResolutionKind.SOCIAL_IDENTITY

    @pytest.mark.asyncio
    async def test_no_matching_strategy(self):
        resolver = RecipientResolver(strategies=[])

        result = await resolver.resolve("anything")

        assert result.address is None
        assert result.error_kind == ErrorKind.INVALID_INPUT

    def test_classification_order(self, vitalik, name_service_factory, identity_factory):
        """First match wins, in the documented order."""
        resolver = make_resolver(name_service_factory(), identity_factory())

        assert resolver.classify(vitalik).name == "literal-address"
        assert resolver.classify("0x" + vitalik[2:].swapcase()).name == "malformed-address"
        assert resolver.classify("0x1234").name == "farcaster"
        assert resolver.classify("jesse.base.eth").name == "basename"
        assert resolver.classify("jesse.eth").name == "farcaster"
        assert resolver.classify("@0xdesmond").name == "farcaster"
        assert resolver.classify("") is None

    @pytest.mark.asyncio
    async def test_custom_strategy_inserted_first(
        self, vitalik, name_service_factory, identity_factory
    ):
        """New strategies are added to the list without touching the resolver."""

        async def always_vitalik(text: str) -> ResolutionResult:
            return ResolutionResult(address=vitalik, kind=ResolutionKind.NAME_SERVICE)

        resolver = make_resolver(name_service_factory(), identity_factory())
        resolver.strategies.insert(
            0,
            ResolutionStrategy(
                name="ens-mainnet",
                kind=ResolutionKind.NAME_SERVICE,
                matches=lambda text: text.endswith(".eth") and not text.endswith(".base.eth"),
                resolve=always_vitalik,
            ),
        )

        result = await resolver.resolve("vitalik.eth")

        assert result.address == vitalik
        assert result.query == "vitalik.eth"

    def test_result_invariant(self, vitalik):
        """A result cannot carry both an address and an error."""
        with pytest.raises(ValueError):
            ResolutionResult(
                address=vitalik,
                error="not found",
                error_kind=ErrorKind.NOT_FOUND,
            )
