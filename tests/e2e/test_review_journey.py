import json

from fastapi.testclient import TestClient
from typer.testing import CliRunner

from talentgate.api.app import create_app
from talentgate.cli.app import app as cli_app

STAFF = {"X-Staff-User": "reviewer-1"}


def test_applicant_to_reviewer_journey(make_draft) -> None:
    client = TestClient(create_app())

    assert client.post("/api/validate/4", json=make_draft()).json()["valid"] is True
    submitted = client.post("/api/applications", json=make_draft())
    assert submitted.status_code == 201
    application_id = submitted.json()["id"]

    listing = client.get(
        "/api/admin/applications",
        params={"search_field": "category", "search_value": "backend", "filter_has_portfolio": "true"},
        headers=STAFF,
    ).json()
    assert [item["id"] for item in listing["applications"]] == [application_id]

    assert client.post(f"/api/admin/applications/{application_id}/favorite", headers=STAFF).json()["is_favorite"]

    share = client.post(f"/api/admin/applications/{application_id}/public", json={"is_public": True}, headers=STAFF)
    token = share.json()["shareable_url"].rsplit("/", 1)[-1]

    public = client.get(f"/api/public/{token}").json()
    assert public["first_name"] == "Ada"
    assert [item["name"] for item in public["skills"]] == ["Python"]


def test_cli_admin_commands(make_draft, tmp_path) -> None:
    client = TestClient(create_app())
    application_id = client.post("/api/applications", json=make_draft()).json()["id"]
    runner = CliRunner()

    listed = runner.invoke(cli_app, ["admin", "list", "--min-skills"])
    assert listed.exit_code == 0, listed.output
    assert json.loads(listed.stdout)["total"] == 1

    bad = runner.invoke(cli_app, ["admin", "list", "--limit", "0"])
    assert bad.exit_code != 0

    output = tmp_path / "applications.csv"
    exported = runner.invoke(cli_app, ["admin", "export", "--format", "csv", "--output", str(output)])
    assert exported.exit_code == 0, exported.output
    assert output.read_text(encoding="utf-8").splitlines()[1].startswith(f'"{application_id}"')

    shared = runner.invoke(cli_app, ["admin", "share", "--id", application_id])
    assert shared.exit_code == 0, shared.output
    assert json.loads(shared.stdout)["is_public"] is True

    unshared = runner.invoke(cli_app, ["admin", "share", "--id", application_id, "--off"])
    assert json.loads(unshared.stdout)["shareable_url"] is None

    favorite = runner.invoke(cli_app, ["admin", "favorite", "--id", application_id, "--user", "reviewer-9"])
    assert json.loads(favorite.stdout) == {"application_id": application_id, "is_favorite": True}
