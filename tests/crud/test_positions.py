"""
岗位管理 API 测试

招聘人员 CRUD 和公开的在招岗位列表
"""
import pytest
from httpx import AsyncClient
from tests.conftest import DataFactory


@pytest.mark.asyncio
async def test_position_crud_flow(client: AsyncClient, factory: DataFactory):
    """测试岗位完整 CRUD 流程"""
    headers = factory.headers

    # 1. Create (通过工厂创建)
    position = await factory.create_position(title="测试岗位")
    position_id = position["id"]
    assert position["is_active"] is True

    # 2. Read (单个)
    response = await client.get(f"/api/v1/positions/{position_id}", headers=headers)
    assert response.status_code == 200
    assert response.json()["data"]["title"] == "测试岗位"

    # 3. Read (列表)
    response = await client.get("/api/v1/positions/all", headers=headers)
    assert response.status_code == 200
    assert response.json()["data"]["total"] == 1

    # 4. Update
    update_data = {"title": "更新后的岗位", "is_active": False}
    response = await client.patch(f"/api/v1/positions/{position_id}", json=update_data, headers=headers)
    assert response.status_code == 200
    assert response.json()["data"]["title"] == "更新后的岗位"
    assert response.json()["data"]["is_active"] is False

    # 5. Delete
    response = await client.delete(f"/api/v1/positions/{position_id}", headers=headers)
    assert response.status_code == 200

    response = await client.get(f"/api/v1/positions/{position_id}", headers=headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_position_validation(client: AsyncClient, factory: DataFactory):
    response = await client.post(
        "/api/v1/positions",
        json={"title": "", "location": "Cebu", "salary_min": -1},
        headers=factory.headers,
    )
    assert response.status_code == 422
    fields = response.json()["data"]["fields"]
    assert {"title", "salary_min"} <= set(fields)


@pytest.mark.asyncio
async def test_update_cannot_clear_required_fields(client: AsyncClient, factory: DataFactory):
    position = await factory.create_position()
    response = await client.patch(
        f"/api/v1/positions/{position['id']}",
        json={"title": None},
        headers=factory.headers,
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_public_positions_lists_only_active(client: AsyncClient, factory: DataFactory):
    """公开列表只返回启用中的岗位，按名称排序；后台列表包含全部"""
    await factory.create_position(title="Nurse")
    await factory.create_position(title="Architect")
    await factory.create_position(title="Driver", is_active=False)

    response = await client.get("/api/v1/positions")
    assert response.status_code == 200
    titles = [p["title"] for p in response.json()["data"]]
    assert titles == ["Architect", "Nurse"]

    response = await client.get("/api/v1/positions/all", headers=factory.headers)
    assert response.json()["data"]["total"] == 3


@pytest.mark.asyncio
async def test_deleting_position_keeps_applications(client: AsyncClient, factory: DataFactory):
    """应聘岗位是自由文本，删除岗位不影响已有申请"""
    position = await factory.create_position(title="Chef")
    applicant = await factory.submit_application(position_applied_for="Chef")

    await client.delete(f"/api/v1/positions/{position['id']}", headers=factory.headers)

    response = await client.get(f"/api/v1/applicants/{applicant['id']}", headers=factory.headers)
    assert response.status_code == 200
    assert response.json()["data"]["position_applied_for"] == "Chef"


@pytest.mark.asyncio
async def test_positions_require_staff(client: AsyncClient):
    response = await client.post("/api/v1/positions", json={"title": "X", "location": "Y"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_open_positions_need_no_token(client: AsyncClient, factory: DataFactory):
    """在招岗位列表不带令牌也能访问，带令牌时结果相同"""
    await factory.create_position(title="Welder")
    await factory.create_position(title="Cashier", is_active=False)

    anonymous = await client.get("/api/v1/positions")
    assert anonymous.status_code == 200
    assert [p["title"] for p in anonymous.json()["data"]] == ["Welder"]

    staff = await client.get("/api/v1/positions", headers=factory.headers)
    assert staff.json()["data"] == anonymous.json()["data"]


@pytest.mark.asyncio
async def test_staff_listing_and_detail_require_staff(
    client: AsyncClient, factory: DataFactory, viewer_headers: dict
):
    position = await factory.create_position()

    response = await client.get("/api/v1/positions/all")
    assert response.status_code == 401
    response = await client.get(f"/api/v1/positions/{position['id']}")
    assert response.status_code == 401
    response = await client.get("/api/v1/positions/all", headers=viewer_headers)
    assert response.status_code == 403
