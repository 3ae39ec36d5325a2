"""Tests for Chart of Accounts API endpoints."""

from fastapi.testclient import TestClient

from tests.factories import TENANT_A, TENANT_B, tenant_headers

BASE = "/api/v1/chart-of-accounts"
HEADERS = tenant_headers(TENANT_A)


def post(client: TestClient, level: str, payload: dict, headers: dict = HEADERS):
    return client.post(f"{BASE}/{level}", json=payload, headers=headers)


def build_path(client: TestClient, headers: dict = HEADERS) -> dict:
    main = post(client, "main-groups", {"name": "Balance Sheet", "code": "1"}, headers).json()
    element = post(client, "element-groups", {"name": "Assets", "code": "10", "main_group_id": main["id"]}, headers).json()
    sub = post(
        client, "sub-element-groups",
        {"name": "Current Assets", "code": "11", "element_group_id": element["id"]}, headers,
    ).json()
    detailed = post(
        client, "detailed-groups",
        {"name": "Cash and Bank", "code": "111", "sub_element_group_id": sub["id"]}, headers,
    ).json()
    return {"main": main, "element": element, "sub": sub, "detailed": detailed}


def test_create_hierarchy_and_account(client: TestClient):
    path = build_path(client)

    response = post(client, "accounts", {
        "detailed_group_id": path["detailed"]["id"],
        "account_name": "Petty Cash",
        "opening_balance": "75.00",
    })

    assert response.status_code == 201
    account = response.json()
    assert account["account_code"] == "10.11.111.001"
    assert account["account_type"] == "asset"
    assert account["is_system_account"] is False


def test_blank_name_rejected(client: TestClient):
    response = post(client, "main-groups", {"name": "  ", "code": "1"})

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "validation_error"


def test_duplicate_main_group_code(client: TestClient):
    post(client, "main-groups", {"name": "Balance Sheet", "code": "1"})

    response = post(client, "main-groups", {"name": "Other", "code": "1"})

    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "duplicate_code"


def test_foreign_parent_rejected(client: TestClient):
    path = build_path(client, tenant_headers(TENANT_B))

    response = post(client, "element-groups", {"name": "Assets", "code": "10", "main_group_id": path["main"]["id"]})

    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "parent_not_found"


def test_delete_rules(client: TestClient):
    path = build_path(client)
    system = post(client, "accounts", {
        "detailed_group_id": path["detailed"]["id"],
        "account_name": "Retained Earnings",
        "is_system_account": True,
    }).json()

    response = client.delete(f"{BASE}/main-groups/{path['main']['id']}", headers=HEADERS)
    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "has_children"

    response = client.delete(f"{BASE}/accounts/{system['id']}", headers=HEADERS)
    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "system_account_protected"

    response = client.delete(f"{BASE}/accounts/9999", headers=HEADERS)
    assert response.status_code == 404


def test_delete_leaf_group(client: TestClient):
    path = build_path(client)

    response = client.delete(f"{BASE}/detailed-groups/{path['detailed']['id']}", headers=HEADERS)

    assert response.status_code == 204
    assert client.get(f"{BASE}/detailed-groups/{path['detailed']['id']}", headers=HEADERS).status_code == 404


def test_list_and_get(client: TestClient):
    path = build_path(client)
    post(client, "element-groups", {"name": "Liabilities", "code": "20", "main_group_id": path["main"]["id"]})

    response = client.get(f"{BASE}/element-groups", headers=HEADERS)
    assert [g["code"] for g in response.json()] == ["10", "20"]

    response = client.get(f"{BASE}/sub-element-groups?parent_id={path['element']['id']}", headers=HEADERS)
    assert [g["name"] for g in response.json()] == ["Current Assets"]

    response = client.get(f"{BASE}/main-groups/{path['main']['id']}", headers=HEADERS)
    assert response.json()["name"] == "Balance Sheet"


def test_patch_group_and_account(client: TestClient):
    path = build_path(client)
    account = post(client, "accounts", {
        "detailed_group_id": path["detailed"]["id"],
        "account_name": "Cash",
    }).json()

    response = client.patch(f"{BASE}/main-groups/{path['main']['id']}", json={"name": "Statement of Position"}, headers=HEADERS)
    assert response.status_code == 200
    assert response.json()["name"] == "Statement of Position"
    assert response.json()["code"] == "1"

    response = client.patch(f"{BASE}/accounts/{account['id']}", json={"is_active": False}, headers=HEADERS)
    assert response.status_code == 200
    assert response.json()["is_active"] is False

    assert client.get(f"{BASE}/accounts", headers=HEADERS).json() == []
    assert len(client.get(f"{BASE}/accounts?include_inactive=true", headers=HEADERS).json()) == 1


def test_tree(client: TestClient):
    path = build_path(client)
    post(client, "accounts", {"detailed_group_id": path["detailed"]["id"], "account_name": "Cash"})

    tree = client.get(f"{BASE}/tree", headers=HEADERS).json()

    accounts = tree[0]["element_groups"][0]["sub_element_groups"][0]["detailed_groups"][0]["accounts"]
    assert [a["account_name"] for a in accounts] == ["Cash"]


def test_csv_import_file(client: TestClient):
    build_path(client)
    content = (
        "Account Name,Element Group,Sub Element Group,Detailed Group,Opening Balance\n"
        "Petty Cash,Assets,Current Assets,Cash and Bank,100\n"
        "Ghost,Assets,Current Assets,Nope,\n"
        "Main Bank,Assets,Current Assets,Cash and Bank,2500\n"
    ).encode()

    response = client.post(
        f"{BASE}/csv-import",
        files={"file": ("accounts.csv", content, "text/csv")},
        headers=HEADERS,
    )

    assert response.status_code == 200
    assert response.json() == {
        "successful": 2,
        "failed": 1,
        "errors": ["Row 3: Detailed group 'Nope' not found"],
    }


def test_csv_import_missing_columns(client: TestClient):
    build_path(client)
    content = b"Account Name,Element Group\nCash,Assets\n"

    response = client.post(
        f"{BASE}/csv-import",
        files={"file": ("accounts.csv", content, "text/csv")},
        headers=HEADERS,
    )

    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["code"] == "missing_required_columns"
    assert detail["missing"] == ["sub element group", "detailed group"]
    assert client.get(f"{BASE}/accounts", headers=HEADERS).json() == []


def test_csv_import_strict_mode(client: TestClient):
    build_path(client)
    content = (
        "Account Name,Element Group,Sub Element Group,Detailed Group\n"
        "Cash,Assets,,Cash and Bank\n"
    ).encode()

    lenient = client.post(
        f"{BASE}/csv-import",
        files={"file": ("accounts.csv", content, "text/csv")},
        headers=HEADERS,
    ).json()
    strict = client.post(
        f"{BASE}/csv-import?strictness=strict",
        files={"file": ("accounts.csv", content, "text/csv")},
        headers=HEADERS,
    ).json()

    assert lenient == {"successful": 0, "failed": 0, "errors": []}
    assert strict["failed"] == 1


def test_csv_upload_rows(client: TestClient):
    build_path(client)

    response = client.post(f"{BASE}/csv-upload", json={"accounts": [
        {
            "account_name": "Cash",
            "element_group": "Assets",
            "sub_element_group": "Current Assets",
            "detailed_group": "Cash and Bank",
            "opening_balance": "12.50",
        },
        {
            "account_name": "Bank",
            "element_group": "Assets",
            "sub_element_group": "Missing",
            "detailed_group": "Cash and Bank",
        },
    ]}, headers=HEADERS)

    assert response.status_code == 200
    assert response.json() == {
        "successful": 1,
        "failed": 1,
        "errors": ["Row 2: Sub element group 'Missing' not found"],
    }


def test_oversized_opening_balance_is_bad_request(client: TestClient):
    path = build_path(client)

    response = post(client, "accounts", {
        "detailed_group_id": path["detailed"]["id"],
        "account_name": "Huge",
        "opening_balance": "1234567890123456789012345678901",
    })

    assert response.status_code == 400
    assert response.json()["detail"]["fields"] == ["opening_balance"]
    assert client.get(f"{BASE}/accounts", headers=HEADERS).json() == []


def test_patch_with_null_required_field_is_bad_request(client: TestClient):
    path = build_path(client)
    account = post(client, "accounts", {
        "detailed_group_id": path["detailed"]["id"],
        "account_name": "Cash",
    }).json()

    response = client.patch(f"{BASE}/main-groups/{path['main']['id']}", json={"is_active": None}, headers=HEADERS)
    assert response.status_code == 400
    assert response.json()["detail"]["fields"] == ["is_active"]

    response = client.patch(
        f"{BASE}/accounts/{account['id']}", json={"is_active": None, "account_name": "Y"}, headers=HEADERS
    )
    assert response.status_code == 400

    stored = client.get(f"{BASE}/accounts/{account['id']}", headers=HEADERS).json()
    assert stored["is_active"] is True
    assert stored["account_name"] == "Cash"
