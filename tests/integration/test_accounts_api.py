"""Integration tests for the /api/user account routes."""

import httpx
import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.core.pagination import Pagination
from src.infrastructure.database.models import Invoice, TaxProfile
from tests.integration.helpers import (
    DEFAULT_PASSWORD,
    MakeResource,
    Register,
    RegisteredAccount,
)


@pytest.mark.integration
class TestCreateAccount:
    """Test POST /api/user."""

    async def test_creates_without_session(
        self, client: httpx.AsyncClient, account: RegisteredAccount
    ) -> None:
        """Verify the new account is returned and no cookie is set."""
        response = await client.post(
            "/api/user",
            json={
                "email": "Grace@Example.com",
                "password": DEFAULT_PASSWORD,
                "name": "Grace",
            },
            headers=account.headers,
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["email"] == "grace@example.com"
        assert set(data) == {"id", "email", "name", "createdAt", "updatedAt"}
        assert "set-cookie" not in response.headers

    async def test_duplicate(
        self, client: httpx.AsyncClient, account: RegisteredAccount
    ) -> None:
        """Verify an existing e-mail is a conflict."""
        response = await client.post(
            "/api/user",
            json={"email": account.email, "password": DEFAULT_PASSWORD, "name": "Ada"},
            headers=account.headers,
        )

        assert response.status_code == 409
        assert response.json()["error"] == "Email already used"

    async def test_requires_session(self, client: httpx.AsyncClient) -> None:
        """Verify account creation is protected."""
        response = await client.post(
            "/api/user",
            json={"email": "x@example.com", "password": DEFAULT_PASSWORD, "name": "X"},
        )

        assert response.status_code == 401


@pytest.mark.integration
class TestListAccounts:
    """Test GET /api/user."""

    async def test_pagination(
        self, client: httpx.AsyncClient, register: Register
    ) -> None:
        """Verify page metadata and newest-first ordering."""
        accounts = [await register() for _ in range(3)]

        response = await client.get(
            "/api/user", params={"page": "1", "limit": "2"}, headers=accounts[0].headers
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["page"] == 1
        assert data["limit"] == 2
        assert data["total"] == 3
        assert data["totalPages"] == 2
        assert [item["id"] for item in data["items"]] == [
            accounts[2].id,
            accounts[1].id,
        ]

        second = await client.get(
            "/api/user", params={"page": "2", "limit": "2"}, headers=accounts[0].headers
        )
        assert [item["id"] for item in second.json()["data"]["items"]] == [
            accounts[0].id
        ]

    @pytest.mark.parametrize(
        ("params", "page", "limit"),
        [
            ({"limit": "999"}, 1, 100),
            ({"page": "abc", "limit": "xyz"}, 1, 10),
            ({"page": "0", "limit": "-5"}, 1, 10),
            ({"page": "\u00b2"}, 1, 10),
            ({"page": "99999999999999999999"}, Pagination.max_page(10), 10),
            ({}, 1, 10),
        ],
    )
    async def test_pagination_normalized(
        self,
        client: httpx.AsyncClient,
        account: RegisteredAccount,
        params: dict[str, str],
        page: int,
        limit: int,
    ) -> None:
        """Verify bad page values fall back and the limit is capped."""
        response = await client.get("/api/user", params=params, headers=account.headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert (data["page"], data["limit"]) == (page, limit)

    async def test_page_past_end(
        self, client: httpx.AsyncClient, account: RegisteredAccount
    ) -> None:
        """Verify a page beyond the last is empty but keeps the total."""
        response = await client.get(
            "/api/user", params={"page": "5"}, headers=account.headers
        )

        data = response.json()["data"]
        assert data["items"] == []
        assert data["total"] == 1

    async def test_enormous_page_is_empty(
        self, client: httpx.AsyncClient, account: RegisteredAccount
    ) -> None:
        """Verify a page number beyond any database offset is just empty."""
        response = await client.get(
            "/api/user",
            params={"page": "99999999999999999999"},
            headers=account.headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["items"] == []
        assert data["total"] == 1

    async def test_filters(self, client: httpx.AsyncClient, register: Register) -> None:
        """Verify case-insensitive substring filters on e-mail and name."""
        ada = await register(email="ada@lovelace.org", name="Ada Lovelace")
        await register(email="grace@navy.mil", name="Grace Hopper")

        by_email = await client.get(
            "/api/user", params={"email": "LOVELACE"}, headers=ada.headers
        )
        by_name = await client.get(
            "/api/user", params={"name": "hop"}, headers=ada.headers
        )

        assert [a["email"] for a in by_email.json()["data"]["items"]] == [
            "ada@lovelace.org"
        ]
        assert [a["name"] for a in by_name.json()["data"]["items"]] == ["Grace Hopper"]


@pytest.mark.integration
class TestReadAccount:
    """Test GET /api/user/{id}."""

    async def test_get(
        self, client: httpx.AsyncClient, account: RegisteredAccount
    ) -> None:
        """Verify an account is returned without its password hash."""
        response = await client.get(f"/api/user/{account.id}", headers=account.headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["id"] == account.id
        assert "password" not in data
        assert "passwordHash" not in data

    async def test_other_accounts_readable(
        self, client: httpx.AsyncClient, register: Register
    ) -> None:
        """Verify the directory lets any session read any account."""
        ada = await register()
        grace = await register()

        response = await client.get(f"/api/user/{grace.id}", headers=ada.headers)

        assert response.status_code == 200

    async def test_missing(
        self, client: httpx.AsyncClient, account: RegisteredAccount
    ) -> None:
        """Verify an unknown id is a 404."""
        response = await client.get("/api/user/999999", headers=account.headers)

        assert response.status_code == 404
        assert response.json()["error"] == "Account not found"
        assert response.json()["errorCode"] == "NOT_FOUND"

    @pytest.mark.parametrize("raw", ["abc", "0", "-1", "1.5", "99999999999999999999"])
    async def test_invalid_id(
        self, client: httpx.AsyncClient, account: RegisteredAccount, raw: str
    ) -> None:
        """Verify malformed ids are rejected before any lookup."""
        response = await client.get(f"/api/user/{raw}", headers=account.headers)

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Invalid User ID format. Must be a positive integer."
        assert body["details"][0]["field"] == "id"


@pytest.mark.integration
class TestUpdateAccount:
    """Test PATCH /api/user/{id}."""

    async def test_rename(
        self, client: httpx.AsyncClient, account: RegisteredAccount
    ) -> None:
        """Verify the name changes and the e-mail stays."""
        response = await client.patch(
            f"/api/user/{account.id}",
            json={"name": "Countess"},
            headers=account.headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["name"] == "Countess"
        assert data["email"] == account.email

    async def test_change_password(
        self, client: httpx.AsyncClient, account: RegisteredAccount
    ) -> None:
        """Verify only the new password logs in afterwards."""
        await client.patch(
            f"/api/user/{account.id}",
            json={"password": "another-long-secret"},
            headers=account.headers,
        )

        old = await client.post(
            "/api/auth/login",
            json={"email": account.email, "password": DEFAULT_PASSWORD},
        )
        new = await client.post(
            "/api/auth/login",
            json={"email": account.email, "password": "another-long-secret"},
        )

        assert old.status_code == 401
        assert new.status_code == 200

    @pytest.mark.parametrize(
        "payload",
        [{"name": None}, {"email": "new@example.com"}, {"name": ""}],
    )
    async def test_rejected_changes(
        self,
        client: httpx.AsyncClient,
        account: RegisteredAccount,
        payload: dict[str, str | None],
    ) -> None:
        """Verify nulls, unknown fields and blank names are rejected."""
        response = await client.patch(
            f"/api/user/{account.id}", json=payload, headers=account.headers
        )

        assert response.status_code == 400

    async def test_other_account(
        self, client: httpx.AsyncClient, register: Register
    ) -> None:
        """Verify an account cannot modify another account."""
        ada = await register()
        grace = await register()

        response = await client.patch(
            f"/api/user/{grace.id}", json={"name": "Hacked"}, headers=ada.headers
        )

        assert response.status_code == 404
        assert response.json()["error"] == "Account not found"


@pytest.mark.integration
class TestDeleteAccount:
    """Test DELETE /api/user/{id}."""

    async def test_cascades(
        self,
        client: httpx.AsyncClient,
        account: RegisteredAccount,
        make_profile: MakeResource,
        make_invoice: MakeResource,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        """Verify deleting an account deletes its profiles and their invoices."""
        profile = await make_profile(account)
        await make_invoice(account, profile["id"])
        await make_invoice(account, profile["id"], amount="5.00")

        response = await client.delete(
            f"/api/user/{account.id}", headers=account.headers
        )

        assert response.status_code == 204
        assert response.content == b""
        async with session_factory() as session:
            profiles = await session.scalar(
                select(func.count()).select_from(TaxProfile)
            )
            invoices = await session.scalar(
                select(func.count()).select_from(Invoice)
            )
        assert profiles == 0
        assert invoices == 0

    async def test_second_delete(
        self, client: httpx.AsyncClient, account: RegisteredAccount
    ) -> None:
        """Verify deleting twice reports the account as missing."""
        await client.delete(f"/api/user/{account.id}", headers=account.headers)

        response = await client.delete(
            f"/api/user/{account.id}", headers=account.headers
        )

        assert response.status_code == 404

    async def test_other_account(
        self, client: httpx.AsyncClient, register: Register
    ) -> None:
        """Verify an account cannot delete another account."""
        ada = await register()
        grace = await register()

        response = await client.delete(f"/api/user/{grace.id}", headers=ada.headers)

        assert response.status_code == 404
        still_there = await client.get(f"/api/user/{grace.id}", headers=grace.headers)
        assert still_there.status_code == 200
