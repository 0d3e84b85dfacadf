"""API endpoint integration tests.

Tests the FastAPI endpoints end to end over an in-memory database.
"""

import pytest
from httpx import AsyncClient

from staffing_payroll import __version__

pytestmark = pytest.mark.asyncio


async def _company(client: AsyncClient, name: str = "Sentinel Facilities") -> dict:
    response = await client.post(
        "/api/v1/companies", json={"name": name, "onboarding_date": "2023-01-01"}
    )
    assert response.status_code == 201
    return response.json()


async def _guard(client: AsyncClient) -> dict:
    response = await client.post(
        "/api/v1/employees",
        json={
            "first_name": "Ravi",
            "last_name": "Kumar",
            "category": "CENTRAL",
            "sub_category": "SKILLED",
            "salary_per_day": "500",
            "pf_enabled": True,
            "esic_enabled": True,
            "onboarding_date": "2023-01-01",
        },
    )
    assert response.status_code == 201
    return response.json()


async def _rate(client: AsyncClient, rate: str, start: str) -> dict:
    response = await client.post(
        "/api/v1/rate-schedules",
        json={
            "category": "CENTRAL",
            "sub_category": "SKILLED",
            "rate_per_day": rate,
            "effective_from": start,
        },
    )
    assert response.status_code == 201
    return response.json()


class TestHealthEndpoints:
    """Test health check endpoints."""

    async def test_health_check(self, client: AsyncClient):
        """Health endpoint should return 200."""
        response = await client.get("/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == __version__
        assert "timestamp" in data

    async def test_readiness_check(self, client: AsyncClient):
        response = await client.get("/ready")
        assert response.status_code == 200
        assert response.json() == {"status": "ready", "database": "reachable"}


class TestRateScheduleEndpoints:
    """Test rate schedule endpoints."""

    async def test_create_closes_prior_and_resolves(self, client: AsyncClient):
        first = await _rate(client, "500", "2024-01-01")
        await _rate(client, "600", "2024-07-01")

        response = await client.get(f"/api/v1/rate-schedules/{first['schedule_id']}")
        assert response.json()["effective_to"] == "2024-06-30"

        response = await client.get(
            "/api/v1/rate-schedules/active",
            params={"category": "CENTRAL", "sub_category": "SKILLED", "as_of_date": "2024-06-30"},
        )
        assert response.status_code == 200
        assert response.json()["rate_per_day"] == "500.00"

    async def test_active_rate_gap_is_422(self, client: AsyncClient):
        await _rate(client, "500", "2024-01-01")

        response = await client.get(
            "/api/v1/rate-schedules/active",
            params={"category": "CENTRAL", "sub_category": "SKILLED", "as_of_date": "2023-06-30"},
        )
        assert response.status_code == 422
        assert response.json()["code"] == "UNRESOLVED_RATE"

    async def test_conflicting_create_is_409(self, client: AsyncClient):
        await _rate(client, "500", "2024-07-01")

        response = await client.post(
            "/api/v1/rate-schedules",
            json={
                "category": "CENTRAL",
                "sub_category": "SKILLED",
                "rate_per_day": "450",
                "effective_from": "2024-01-01",
            },
        )
        assert response.status_code == 409
        assert response.json()["code"] == "CONFLICT"

    async def test_list_with_pagination(self, client: AsyncClient):
        await _rate(client, "500", "2024-01-01")
        await _rate(client, "600", "2024-07-01")

        response = await client.get("/api/v1/rate-schedules", params={"page": 1, "limit": 1})
        data = response.json()

        assert data["total"] == 2
        assert data["has_next_page"] is True
        assert data["has_prev_page"] is False

    async def test_delete(self, client: AsyncClient):
        schedule = await _rate(client, "500", "2024-01-01")

        response = await client.delete(f"/api/v1/rate-schedules/{schedule['schedule_id']}")
        assert response.status_code == 204

        response = await client.get(f"/api/v1/rate-schedules/{schedule['schedule_id']}")
        assert response.status_code == 404


class TestEmploymentEndpoints:
    """Test employee assignment endpoints."""

    async def test_assign_conflict_and_transfer(self, client: AsyncClient):
        first_company = await _company(client)
        second_company = await _company(client, "Harbour Logistics")
        guard = await _guard(client)
        base = f"/api/v1/employees/{guard['employee_id']}/employments"

        response = await client.post(
            base,
            json={
                "company_id": first_company["company_id"],
                "designation": "Security Guard",
                "department": "Security",
                "joining_date": "2024-01-01",
            },
        )
        assert response.status_code == 201
        employment = response.json()
        assert employment["salary_type"] == "PER_DAY"

        response = await client.post(
            base,
            json={
                "company_id": second_company["company_id"],
                "designation": "Security Guard",
                "department": "Security",
                "joining_date": "2024-02-01",
            },
        )
        assert response.status_code == 409
        assert response.json()["record_id"] == employment["employment_id"]

        response = await client.post(
            f"/api/v1/employments/{employment['employment_id']}/terminate",
            json={"leaving_date": "2024-01-31", "reason": "Transfer"},
        )
        assert response.status_code == 200
        assert response.json()["status"] == "INACTIVE"

        response = await client.post(
            base,
            json={
                "company_id": second_company["company_id"],
                "designation": "Head Guard",
                "department": "Security",
                "joining_date": "2024-02-01",
            },
        )
        assert response.status_code == 201

        history = (await client.get(base)).json()
        current = (await client.get(f"{base}/current")).json()
        assert len(history) == 2
        assert current["company_id"] == second_company["company_id"]

    async def test_patch_null_joining_date_is_422(self, client: AsyncClient):
        company = await _company(client)
        guard = await _guard(client)
        response = await client.post(
            f"/api/v1/employees/{guard['employee_id']}/employments",
            json={
                "company_id": company["company_id"],
                "designation": "Security Guard",
                "department": "Security",
                "joining_date": "2024-01-01",
            },
        )
        employment_id = response.json()["employment_id"]
        await client.post(
            f"/api/v1/employments/{employment_id}/terminate", json={"leaving_date": "2024-01-31"}
        )

        response = await client.patch(
            f"/api/v1/employments/{employment_id}", json={"joining_date": None}
        )
        assert response.status_code == 422
        assert response.json()["field"] == "joining_date"

    async def test_invalid_employee_is_422(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/employees",
            json={
                "first_name": "Ravi",
                "last_name": "Kumar",
                "category": "STATE",
                "salary_per_day": "500",
                "onboarding_date": "2023-01-01",
            },
        )
        assert response.status_code == 422
        assert response.json()["field"] == "sub_category"

    async def test_assign_to_terminated_company(self, client: AsyncClient):
        company = await _company(client)
        guard = await _guard(client)
        await client.post(f"/api/v1/companies/{company['company_id']}/terminate")

        response = await client.post(
            f"/api/v1/employees/{guard['employee_id']}/employments",
            json={
                "company_id": company["company_id"],
                "designation": "Security Guard",
                "department": "Security",
                "joining_date": "2024-01-01",
            },
        )
        assert response.status_code == 409
        assert response.json()["code"] == "INVALID_STATE"


class TestTemplateEndpoints:
    """Test salary template editing endpoints."""

    async def test_default_template(self, client: AsyncClient):
        company = await _company(client)

        response = await client.get(f"/api/v1/companies/{company['company_id']}/template")
        data = response.json()

        keys = [f["key"] for f in data["mandatory_fields"]]
        assert "basicPay" in keys
        assert [f["key"] for f in data["custom_fields"]] == ["bonus", "advanceTaken"]

    async def test_disable_mandatory_rejected(self, client: AsyncClient):
        company = await _company(client)

        response = await client.put(
            f"/api/v1/companies/{company['company_id']}/template/fields/employeeName/enabled",
            json={"enabled": False},
        )
        assert response.status_code == 422
        assert response.json()["field"] == "employeeName"

    async def test_replace_with_text_basic_pay_is_422(self, client: AsyncClient):
        company = await _company(client)
        url = f"/api/v1/companies/{company['company_id']}/template"
        template = (await client.get(url)).json()
        for f in template["mandatory_fields"]:
            if f["key"] == "basicPay":
                f["type"] = "TEXT"
                f["default_value"] = "n/a"

        response = await client.put(url, json=template)

        assert response.status_code == 422
        assert response.json()["field"] == "basicPay"

    async def test_custom_field_lifecycle(self, client: AsyncClient):
        company = await _company(client)
        base = f"/api/v1/companies/{company['company_id']}/template"

        response = await client.post(
            f"{base}/custom-fields",
            json={"key": "nightAllowance", "label": "Night Allowance", "type": "NUMBER", "purpose": "ALLOWANCE"},
        )
        assert response.status_code == 201

        response = await client.put(f"{base}/fields/nightAllowance/default", json={"value": "300"})
        added = [f for f in response.json()["custom_fields"] if f["key"] == "nightAllowance"][0]
        assert added["default_value"] == "300"

        response = await client.delete(f"{base}/custom-fields/nightAllowance")
        assert "nightAllowance" not in [f["key"] for f in response.json()["custom_fields"]]

        response = await client.delete(f"{base}/custom-fields/pf")
        assert response.status_code == 422


class TestPayslipEndpoint:
    """Test payslip computation endpoint."""

    async def test_compute_payslip(self, client: AsyncClient):
        company = await _company(client)
        guard = await _guard(client)
        await _rate(client, "500", "2024-01-01")
        await client.post(
            f"/api/v1/employees/{guard['employee_id']}/employments",
            json={
                "company_id": company["company_id"],
                "designation": "Security Guard",
                "department": "Security",
                "joining_date": "2024-01-01",
            },
        )

        response = await client.post(
            "/api/v1/payslips/compute",
            json={
                "employee_id": guard["employee_id"],
                "year": 2024,
                "month": 3,
                "days_worked": "26",
                "inputs": {"bonus": "1000"},
            },
        )
        assert response.status_code == 200
        data = response.json()

        assert data["basic"] == "13000.00"
        assert data["gross_earning"] == "14000.00"
        assert data["information"]["employeeName"] == "Ravi Kumar"
        assert len(data["fingerprint"]) == 32

    async def test_compute_company_payroll(self, client: AsyncClient):
        company = await _company(client)
        guard = await _guard(client)
        await client.post(
            f"/api/v1/employees/{guard['employee_id']}/employments",
            json={
                "company_id": company["company_id"],
                "designation": "Security Guard",
                "department": "Security",
                "joining_date": "2024-01-01",
            },
        )
        request = {
            "company_id": company["company_id"],
            "year": 2024,
            "month": 3,
            "days_worked": {guard["employee_id"]: "26"},
        }

        # No rate schedule yet: reported, not raised
        response = await client.post("/api/v1/payslips/compute-company", json=request)
        assert response.status_code == 200
        data = response.json()
        assert data["payslips"] == []
        assert data["failures"][0]["code"] == "UNRESOLVED_RATE"

        await _rate(client, "500", "2024-01-01")
        response = await client.post("/api/v1/payslips/compute-company", json=request)
        data = response.json()

        assert data["period"] == "2024-03"
        assert data["failures"] == []
        assert data["payslips"][0]["basic"] == "13000.00"
        assert data["total_gross"] == data["payslips"][0]["gross_earning"]

    async def test_unknown_employee_is_404(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/payslips/compute",
            json={"employee_id": "00000000-0000-0000-0000-000000000001", "year": 2024, "month": 3},
        )
        assert response.status_code == 404
