from __future__ import annotations

WEEK = "2025-03-03"
TUESDAY = "2025-03-04"


def save_cell(client, **payload):
    body = {"technician": "t-alex", "date": TUESDAY, "action": "save", **payload}
    return client.post("/api/schedule/cell", json=body)


def entries_between(client, start=WEEK, end="2025-03-09"):
    response = client.get(f"/api/schedule?start={start}&end={end}")
    assert response.status_code == 200
    return response.get_json()["entries"]


def test_healthz(client):
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.data == b"OK"


def test_index_redirects_to_grid(client):
    response = client.get("/")
    assert response.status_code == 302
    assert response.headers["Location"].endswith("/schedule")


def test_grid_lists_group_members(client):
    response = client.get(f"/schedule?date={WEEK}")
    assert response.status_code == 200
    data = response.get_json()
    assert [column["date"] for column in data["columns"]] == [
        "2025-03-03", "2025-03-04", "2025-03-05", "2025-03-06", "2025-03-07",
    ]
    assert [row["member"]["id"] for row in data["rows"]] == ["t-alex", "t-bree", "c-sparks"]
    assert data["rows"][0]["cells"][0]["kind"] == "empty"
    assert "p-archive" not in {project["id"] for project in data["projects"]}


def test_grid_rejects_bad_date(client):
    assert client.get("/schedule?date=next-tuesday").status_code == 400


def test_cell_save_is_keyed_by_date_slot_subject(client):
    slots = {"AM1": {"entry_type": "project", "project": "p-harbour"}}
    first = save_cell(client, slots=slots)
    assert first.status_code == 200
    assert len(first.get_json()["saved"]) == 1

    second = save_cell(client, slots={"AM1": {"entry_type": "project", "project": "p-cinema"}})
    assert second.status_code == 200

    entries = entries_between(client)
    assert len(entries) == 1
    assert entries[0]["project"] == "p-cinema"
    assert entries[0]["project_name"] == "Patel"
    assert entries[0]["technician"] == "t-alex"
    assert entries[0]["contractor"] is None


def test_cell_fill_day_then_clear(client):
    save_cell(client, slots={"AM1": {"entry_type": "leave", "leave_type": "annual"}}, actions=["fill_day"])
    entries = entries_between(client)
    assert sorted(entry["time_slot"] for entry in entries) == ["AM1", "AM2", "PM1", "PM2"]
    assert {entry["leave_type"] for entry in entries} == {"annual"}

    grid = client.get(f"/schedule?date={WEEK}").get_json()
    assert grid["rows"][0]["cells"][1]["label"] == "AL"

    cleared = save_cell(client, actions=["clear_day"])
    assert len(cleared.get_json()["deleted"]) == 4
    assert entries_between(client) == []


def test_cell_preview_does_not_write(client):
    save_cell(client, slots={"AM1": {"project": "p-harbour"}})
    response = save_cell(client, action="preview", slots={"AM1": {"entry_type": "meeting", "project": None}})
    data = response.get_json()
    assert len(data["deletes"]) == 1
    assert data["upserts"][0]["entry_type"] == "meeting"
    assert entries_between(client)[0]["entry_type"] == "project"


def test_cell_rejects_unknown_action_and_bad_values(client):
    assert save_cell(client, action="explode").status_code == 400
    assert save_cell(client, slots={"AM1": {"entry_type": "nap"}}).status_code == 400
    assert save_cell(client, actions=["shuffle"]).status_code == 400


def test_propagate_copies_to_rest_of_week(client):
    response = client.post(
        "/api/schedule/cell",
        json={
            "technician": "t-bree",
            "date": WEEK,
            "action": "propagate",
            "slots": {"AM1": {"project": "p-office"}},
        },
    )
    assert response.status_code == 200
    data = response.get_json()
    assert data["targets"] == ["2025-03-04", "2025-03-05", "2025-03-06", "2025-03-07"]
    entries = entries_between(client)
    assert sorted(entry["date"] for entry in entries) == data["targets"]


def test_contractor_cell(client):
    response = client.post(
        "/api/schedule/cell",
        json={"contractor": "c-sparks", "date": TUESDAY, "slots": {"PM1": {"entry_type": "quoting"}}},
    )
    assert response.status_code == 200
    (entry,) = entries_between(client)
    assert entry["contractor"] == "c-sparks"
    assert entry["technician"] is None


def test_open_cell_on_holiday_is_locked(client):
    client.post("/api/schedule/holidays/seed", json={"year": 2025})
    response = client.get("/api/schedule/cell?kind=technician&id=t-alex&date=2025-04-18")
    assert response.status_code == 409
    assert response.get_json()["summary"]["kind"] == "holiday"

    ok = client.get(f"/api/schedule/cell?kind=technician&id=t-alex&date={TUESDAY}")
    assert ok.status_code == 200
    assert ok.get_json()["editor"]["active_slot"] == "AM1"


def test_holidays_seed_and_list(client):
    assert client.post("/api/schedule/holidays/seed", json={}).status_code == 400
    client.post("/api/schedule/holidays/seed", json={"year": 2025})
    client.post("/api/schedule/holidays/seed", json={"year": 2025})

    holidays = client.get("/api/schedule/holidays?year=2025").get_json()["holidays"]
    names = [holiday["name"] for holiday in holidays]
    assert len(names) == 9
    assert "Queen's Birthday" in names

    nsw = client.get("/api/schedule/holidays?year=2025&state=NSW").get_json()["holidays"]
    assert "Queen's Birthday" not in [holiday["name"] for holiday in nsw]
    assert client.get("/api/schedule/holidays?state=XX").status_code == 400


def test_copy_day_conflict_and_missing(client):
    save_cell(client, slots={"AM1": {"project": "p-harbour"}, "PM1": {"entry_type": "office"}})
    payload = {"technician": "t-alex", "source_date": TUESDAY, "target_date": "2025-03-05"}

    created = client.post("/api/schedule/copy", json=payload)
    assert created.status_code == 201
    assert len(created.get_json()["entries"]) == 2

    conflict = client.post("/api/schedule/copy", json=payload)
    assert conflict.status_code == 409
    assert sorted(conflict.get_json()["conflicting_slots"]) == ["AM1", "PM1"]

    missing = client.post("/api/schedule/copy", json={**payload, "source_date": "2025-03-06"})
    assert missing.status_code == 404


def test_bulk_upsert_and_delete(client):
    response = client.post(
        "/api/schedule/bulk",
        json={
            "entries": [
                {"date": TUESDAY, "time_slot": "AM1", "technician": "t-bree", "entry_type": "wfh"},
                {"date": TUESDAY, "time_slot": "AM1", "technician": "t-bree", "entry_type": "training"},
            ]
        },
    )
    assert response.status_code == 200
    ids = {entry["id"] for entry in response.get_json()["entries"]}
    assert len(ids) == 1
    (entry,) = entries_between(client)
    assert entry["entry_type"] == "training"

    assert client.delete(f"/api/schedule/entries/{entry['id']}").status_code == 200
    assert client.delete(f"/api/schedule/entries/{entry['id']}").status_code == 404

    both = {"date": TUESDAY, "time_slot": "AM1", "technician": "t-bree", "contractor": "c-sparks",
            "entry_type": "wfh"}
    assert client.post("/api/schedule/bulk", json={"entries": [both]}).status_code == 400


def test_subject_and_project_views(client):
    save_cell(client, slots={"AM1": {"project": "p-harbour"}, "AM2": {"project": "p-harbour"}})
    client.post(
        "/api/schedule/cell",
        json={"contractor": "c-sparks", "date": TUESDAY, "slots": {"AM1": {"project": "p-harbour"}}},
    )

    tech = client.get(f"/api/schedule/technicians/t-alex?start={WEEK}&end=2025-03-09").get_json()
    assert len(tech["entries"]) == 2
    assert client.get("/api/schedule/technicians/nobody").status_code == 404

    project = client.get(f"/api/schedule/projects/p-harbour?start={WEEK}&end=2025-03-09").get_json()
    assert project["summary"] == {"total_slots": 3, "subjects_involved": 2}
    assert list(project["by_date"]) == [TUESDAY]


def test_availability(client):
    save_cell(client, slots={"AM1": {"project": "p-harbour"}})
    response = client.get(f"/api/schedule/availability?date={TUESDAY}&slots=AM1,AM2")
    records = {record["id"]: record for record in response.get_json()["availability"]}
    assert records["t-alex"]["booked_slots"] == ["AM1"]
    assert records["t-alex"]["is_partially_available"] is True
    assert records["t-bree"]["is_fully_available"] is True
    assert client.get("/api/schedule/availability").status_code == 400


def test_export_xlsx(client):
    save_cell(client, slots={"AM1": {"project": "p-harbour"}})
    response = client.get(f"/schedule/export.xlsx?date={WEEK}")
    assert response.status_code == 200
    assert "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet" in response.headers["Content-Type"]
    assert response.data[:2] == b"PK"


def test_group_membership_validation(client):
    bad_type = client.post("/api/groups/g-install/members", json={"member_type": "robot", "id": "t-cody"})
    assert bad_type.status_code == 400
    no_subject = client.post("/api/groups/g-install/members", json={"member_type": "user"})
    assert no_subject.status_code == 400
    no_group = client.post("/api/groups/g-missing/members", json={"member_type": "user", "user_id": "t-cody"})
    assert no_group.status_code == 404
    duplicate = client.post("/api/groups/g-install/members", json={"member_type": "user", "user_id": "t-alex"})
    assert duplicate.status_code == 400


def test_group_membership_changes(client):
    unassigned = client.get("/api/technicians?unassigned=1").get_json()["technicians"]
    assert [tech["id"] for tech in unassigned] == ["t-cody", "t-dane"]

    added = client.post(
        "/api/groups/g-install/members", json={"member_type": "user", "user_id": "t-cody", "role": "LEAD"}
    )
    assert added.status_code == 201
    members = added.get_json()["members"]
    assert members[-1] == {
        "member_type": "user", "id": "t-cody", "name": "Cody Tran", "role": "LEAD", "display_order": 2,
    }

    client.put("/api/groups/g-install/reorder", json={"member_ids": ["t-cody", "t-alex", "t-bree"]})
    group = client.put("/api/groups/g-install/members/t-alex", json={"member_type": "user", "role": ""}).get_json()
    assert [m["id"] for m in group["members"]] == ["t-cody", "t-alex", "t-bree"]
    assert group["members"][1]["role"] is None

    save_cell(client, slots={"AM1": {"project": "p-harbour"}})
    removed = client.delete("/api/groups/g-install/members/t-alex?member_type=user").get_json()
    assert "t-alex" not in [m["id"] for m in removed["members"]]
    assert len(entries_between(client)) == 1


def test_group_crud(client):
    assert client.post("/api/groups", json={"name": "  "}).status_code == 400
    created = client.post("/api/groups", json={"name": "Service", "display_order": 5})
    assert created.status_code == 201
    group_id = created.get_json()["id"]

    updated = client.put(f"/api/groups/{group_id}", json={"name": "Service Desk"}).get_json()
    assert updated["name"] == "Service Desk"
    assert updated["display_order"] == 5

    assert client.delete(f"/api/groups/{group_id}").status_code == 200
    assert client.delete(f"/api/groups/{group_id}").status_code == 404


def test_contractor_lifecycle(client):
    created = client.post(
        "/api/contractors",
        json={"name": "Pat Plaster", "company": "Walls R Us", "category": "subcontractor", "group_id": "g-external"},
    )
    assert created.status_code == 201
    contractor = created.get_json()
    assert contractor["display_name"] == "Pat Plaster (Walls R Us)"
    assert contractor["role_label"] == "SUB"

    groups = client.get("/api/groups").get_json()["groups"]
    external = next(group for group in groups if group["id"] == "g-external")
    assert contractor["id"] in [member["id"] for member in external["members"]]

    client.post(
        "/api/schedule/cell",
        json={"contractor": contractor["id"], "date": TUESDAY, "slots": {"AM1": {"entry_type": "other"}}},
    )
    soft = client.delete(f"/api/contractors/{contractor['id']}").get_json()
    assert soft == {"deactivated": True, "scheduled_entries": 1}
    active = client.get("/api/contractors").get_json()["contractors"]
    assert contractor["id"] not in [c["id"] for c in active]

    client.post(f"/api/contractors/{contractor['id']}/reactivate")
    hard = client.delete(f"/api/contractors/{contractor['id']}?hard=true").get_json()
    assert hard == {"deleted": True, "entries_deleted": 1}
    assert entries_between(client) == []
    assert client.get(f"/api/contractors/{contractor['id']}").status_code == 404


def test_contractor_validation(client):
    assert client.post("/api/contractors", json={"name": ""}).status_code == 400
    assert client.post("/api/contractors", json={"name": "X", "category": "plumber"}).status_code == 400
    assert client.put("/api/contractors/missing", json={"name": "X"}).status_code == 404


def test_technician_notes(client):
    response = client.put("/api/technicians/t-bree/notes", json={"notes": "  Has the van this week "})
    assert response.status_code == 200
    assert response.get_json()["schedule_notes"] == "Has the van this week"
    assert client.put("/api/technicians/nobody/notes", json={"notes": "x"}).status_code == 404


def test_bulk_rejects_leave_without_leave_type(client):
    leave = {"date": TUESDAY, "time_slot": "AM1", "technician": "t-bree", "entry_type": "leave"}
    assert client.post("/api/schedule/bulk", json={"entries": [leave]}).status_code == 400
    assert entries_between(client) == []

    leave["leave_type"] = "sick"
    assert client.post("/api/schedule/bulk", json={"entries": [leave]}).status_code == 200
    (entry,) = entries_between(client)
    assert entry["leave_type"] == "sick"


def test_contractor_cannot_reuse_a_technician_id(client):
    save_cell(client, slots={"AM1": {"project": "p-harbour"}})

    response = client.post("/api/contractors", json={"id": "t-alex", "name": "Alex Namesake"})
    assert response.status_code == 400
    assert client.post("/api/contractors", json={"id": "c-sparks", "name": "Sam Again"}).status_code == 400

    cell = client.get(f"/api/schedule/cell?kind=technician&id=t-alex&date={TUESDAY}").get_json()
    assert cell["editor"]["slots"]["AM1"]["occupied"] is True


def test_propagate_reads_string_weekends_flag(client):
    body = {"technician": "t-bree", "date": "2025-03-07", "action": "propagate",
            "slots": {"AM1": {"entry_type": "office"}}}

    hidden = client.post("/api/schedule/cell", json={**body, "weekends": "false"}).get_json()
    assert hidden["targets"] == []

    shown = client.post("/api/schedule/cell", json={**body, "weekends": "true"}).get_json()
    assert shown["targets"] == ["2025-03-08", "2025-03-09"]
