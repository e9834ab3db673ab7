"""Integration tests for the /api/taxProfiles routes."""

import httpx
import pytest

from tests.integration.helpers import MakeResource, Register, RegisteredAccount


@pytest.mark.integration
class TestCreateTaxProfile:
    """Test POST /api/taxProfiles."""

    async def test_defaults_to_caller(
        self, client: httpx.AsyncClient, account: RegisteredAccount
    ) -> None:
        """Verify a profile without ``userId`` belongs to the caller."""
        response = await client.post(
            "/api/taxProfiles",
            json={
                "name": "  Freelance  ",
                "tax_id_number": "PT-123456789",
                "address": "Rua Augusta 10, Lisboa",
            },
            headers=account.headers,
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["userId"] == account.id
        assert data["name"] == "Freelance"
        assert data["tax_id_number"] == "PT-123456789"
        assert set(data) == {
            "id",
            "userId",
            "name",
            "tax_id_number",
            "address",
            "createdAt",
            "updatedAt",
        }

    async def test_explicit_self(
        self, client: httpx.AsyncClient, account: RegisteredAccount
    ) -> None:
        """Verify the caller may name itself as the owner."""
        response = await client.post(
            "/api/taxProfiles",
            json={
                "userId": account.id,
                "name": "Main",
                "tax_id_number": "ABC-12345",
                "address": "1 Long Street, Springfield",
            },
            headers=account.headers,
        )

        assert response.status_code == 201
        assert response.json()["data"]["userId"] == account.id

    async def test_other_owner(
        self, client: httpx.AsyncClient, register: Register
    ) -> None:
        """Verify a profile cannot be attached to another account."""
        ada = await register()
        grace = await register()

        response = await client.post(
            "/api/taxProfiles",
            json={
                "userId": grace.id,
                "name": "Main",
                "tax_id_number": "ABC-12345",
                "address": "1 Long Street, Springfield",
            },
            headers=ada.headers,
        )

        assert response.status_code == 404
        assert response.json()["error"] == "Account not found"

    @pytest.mark.parametrize(
        ("override", "field"),
        [
            ({"tax_id_number": "AB 12"}, "tax_id_number"),
            ({"tax_id_number": "1234"}, "tax_id_number"),
            ({"address": "short"}, "address"),
            ({"name": "   "}, "name"),
            ({"userId": 0}, "userId"),
        ],
    )
    async def test_validation(
        self,
        client: httpx.AsyncClient,
        account: RegisteredAccount,
        override: dict[str, object],
        field: str,
    ) -> None:
        """Verify malformed profiles are rejected with the failing field."""
        payload = {
            "name": "Main",
            "tax_id_number": "ABC-12345",
            "address": "1 Long Street, Springfield",
            **override,
        }

        response = await client.post(
            "/api/taxProfiles", json=payload, headers=account.headers
        )

        assert response.status_code == 400
        assert field in {d["field"] for d in response.json()["details"]}


@pytest.mark.integration
class TestListTaxProfiles:
    """Test GET /api/taxProfiles."""

    async def test_only_own_profiles(
        self,
        client: httpx.AsyncClient,
        register: Register,
        make_profile: MakeResource,
    ) -> None:
        """Verify each account sees only its own profiles."""
        ada = await register()
        grace = await register()
        mine = await make_profile(ada, name="Ada's")
        await make_profile(grace, name="Grace's")

        response = await client.get("/api/taxProfiles", headers=ada.headers)

        data = response.json()["data"]
        assert data["total"] == 1
        assert [p["id"] for p in data["items"]] == [mine["id"]]

    async def test_filters(
        self,
        client: httpx.AsyncClient,
        account: RegisteredAccount,
        make_profile: MakeResource,
    ) -> None:
        """Verify name, tax id and owner filters."""
        home = await make_profile(account, name="Household", tax_id_number="HH-0001")
        await make_profile(account, name="Studio", tax_id_number="ST-0002")

        by_name = await client.get(
            "/api/taxProfiles", params={"name": "HOUSE"}, headers=account.headers
        )
        by_tax_id = await client.get(
            "/api/taxProfiles",
            params={"tax_id_number": "hh-"},
            headers=account.headers,
        )
        by_owner = await client.get(
            "/api/taxProfiles",
            params={"userId": str(account.id)},
            headers=account.headers,
        )

        assert [p["id"] for p in by_name.json()["data"]["items"]] == [home["id"]]
        assert [p["id"] for p in by_tax_id.json()["data"]["items"]] == [home["id"]]
        assert by_owner.json()["data"]["total"] == 2

    async def test_wildcards_are_literal(
        self,
        client: httpx.AsyncClient,
        account: RegisteredAccount,
        make_profile: MakeResource,
    ) -> None:
        """Verify ``%`` in a filter matches only a literal percent sign."""
        await make_profile(account, name="Plain")

        response = await client.get(
            "/api/taxProfiles", params={"name": "%"}, headers=account.headers
        )

        assert response.json()["data"]["items"] == []

    async def test_invalid_owner_filter(
        self, client: httpx.AsyncClient, account: RegisteredAccount
    ) -> None:
        """Verify a non-numeric ``userId`` filter is rejected."""
        response = await client.get(
            "/api/taxProfiles", params={"userId": "me"}, headers=account.headers
        )

        assert response.status_code == 400


@pytest.mark.integration
class TestTaxProfileItem:
    """Test reading, updating and deleting one tax profile."""

    async def test_get(
        self,
        client: httpx.AsyncClient,
        account: RegisteredAccount,
        make_profile: MakeResource,
    ) -> None:
        """Verify a profile is returned to its owner."""
        profile = await make_profile(account)

        response = await client.get(
            f"/api/taxProfiles/{profile['id']}", headers=account.headers
        )

        assert response.status_code == 200
        assert response.json()["data"] == profile

    async def test_invalid_id(
        self, client: httpx.AsyncClient, account: RegisteredAccount
    ) -> None:
        """Verify a malformed id names the entity."""
        response = await client.get("/api/taxProfiles/abc", headers=account.headers)

        assert response.status_code == 400
        assert response.json()["error"] == (
            "Invalid Tax profile ID format. Must be a positive integer."
        )

    @pytest.mark.parametrize("method", ["GET", "PATCH", "DELETE"])
    async def test_other_owner_looks_missing(
        self,
        client: httpx.AsyncClient,
        register: Register,
        make_profile: MakeResource,
        method: str,
    ) -> None:
        """Verify another account's profile is indistinguishable from none."""
        ada = await register()
        grace = await register()
        profile = await make_profile(grace)

        response = await client.request(
            method,
            f"/api/taxProfiles/{profile['id']}",
            json={"name": "Stolen"} if method == "PATCH" else None,
            headers=ada.headers,
        )

        assert response.status_code == 404
        assert response.json()["error"] == "Tax profile not found"

    async def test_partial_update(
        self,
        client: httpx.AsyncClient,
        account: RegisteredAccount,
        make_profile: MakeResource,
    ) -> None:
        """Verify only the sent fields change."""
        profile = await make_profile(account)

        response = await client.patch(
            f"/api/taxProfiles/{profile['id']}",
            json={"address": "2 Short Avenue, Shelbyville"},
            headers=account.headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["address"] == "2 Short Avenue, Shelbyville"
        assert data["name"] == profile["name"]
        assert data["tax_id_number"] == profile["tax_id_number"]

    @pytest.mark.parametrize(
        "payload",
        [{"name": None}, {"address": None}, {"owner": 3}, {"tax_id_number": "x"}],
    )
    async def test_rejected_updates(
        self,
        client: httpx.AsyncClient,
        account: RegisteredAccount,
        make_profile: MakeResource,
        payload: dict[str, object],
    ) -> None:
        """Verify nulls, unknown fields and invalid values are rejected."""
        profile = await make_profile(account)

        response = await client.patch(
            f"/api/taxProfiles/{profile['id']}", json=payload, headers=account.headers
        )

        assert response.status_code == 400

    async def test_move_to_other_owner(
        self,
        client: httpx.AsyncClient,
        register: Register,
        make_profile: MakeResource,
    ) -> None:
        """Verify a profile cannot be handed to another account."""
        ada = await register()
        grace = await register()
        profile = await make_profile(ada)

        response = await client.patch(
            f"/api/taxProfiles/{profile['id']}",
            json={"userId": grace.id},
            headers=ada.headers,
        )

        assert response.status_code == 404
        assert response.json()["error"] == "Account not found"

    async def test_delete_cascades_invoices(
        self,
        client: httpx.AsyncClient,
        account: RegisteredAccount,
        make_profile: MakeResource,
        make_invoice: MakeResource,
    ) -> None:
        """Verify deleting a profile deletes its invoices and nothing else."""
        doomed = await make_profile(account, name="Doomed")
        kept = await make_profile(account, name="Kept")
        gone = await make_invoice(account, doomed["id"])
        survivor = await make_invoice(account, kept["id"])

        response = await client.delete(
            f"/api/taxProfiles/{doomed['id']}", headers=account.headers
        )

        assert response.status_code == 204
        missing = await client.get(
            f"/api/invoices/{gone['id']}", headers=account.headers
        )
        assert missing.status_code == 404
        remaining = await client.get("/api/invoices", headers=account.headers)
        assert [i["id"] for i in remaining.json()["data"]["items"]] == [survivor["id"]]
