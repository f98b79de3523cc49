from datetime import datetime, timedelta

import pytest

from app.domain.workflows.schemas import EmailSchedule, WorkflowCreate
from app.domain.workflows.service import WorkflowService
from app.domain.workflows.trigger import StageChangeEvent, TriggerEvaluator, workflow_matches
from app.models import Deal, PatientEmailDraft
from app.shared.errors import NotFoundError


def _workflow(db, stages, from_index=0, to_index=1, pipeline=None, schedule=None, active=True):
    service = WorkflowService(db)
    workflow = service.create_workflow(
        WorkflowCreate(
            name="Processed email",
            active=active,
            from_stage_id=stages[from_index].id if from_index is not None else None,
            to_stage_id=stages[to_index].id,
            pipeline=pipeline,
        )
    )
    service.upsert_email_action(
        workflow.id,
        "Hi {{patient.first_name}}",
        "Deal: {{deal.title}} / Pipeline: {{deal.pipeline}} / {{patient.nickname}}",
        schedule,
    )
    return workflow


def _event(deal, stages, from_index=0, to_index=1, pipeline="Geneva"):
    return StageChangeEvent(
        deal_id=deal.id,
        pipeline=pipeline,
        from_stage_id=stages[from_index].id,
        to_stage_id=stages[to_index].id,
    )


def test_workflow_matching_rules():
    event = StageChangeEvent(deal_id="d", pipeline="Geneva", from_stage_id="a", to_stage_id="b")

    assert workflow_matches({"to_stage_id": "b"}, event)
    assert workflow_matches({"to_stage_id": "b", "from_stage_id": "a", "pipeline": "Geneva"}, event)
    assert not workflow_matches({"to_stage_id": "c"}, event)
    assert not workflow_matches({"to_stage_id": "b", "from_stage_id": "x"}, event)
    assert not workflow_matches({"to_stage_id": "b", "pipeline": "Zurich"}, event)
    assert not workflow_matches({}, event)


def test_matching_workflow_creates_rendered_draft(db, deal, stages, patient):
    workflow = _workflow(db, stages)

    drafts = TriggerEvaluator(db).handle_stage_change(_event(deal, stages))

    assert len(drafts) == 1
    draft = drafts[0]
    assert draft.workflow_id == workflow.id
    assert draft.patient_id == patient.id
    assert draft.to_email == "ana.silva@example.com"
    assert draft.subject == "Hi Ana"
    assert draft.body == "Deal: Rhinoplasty enquiry / Pipeline: Geneva / "
    assert draft.status == "draft"
    assert draft.send_mode == "immediate"


def test_inactive_and_non_matching_workflows_do_not_fire(db, deal, stages):
    _workflow(db, stages, active=False)
    _workflow(db, stages, to_index=2)
    _workflow(db, stages, pipeline="Zurich")

    drafts = TriggerEvaluator(db).handle_stage_change(_event(deal, stages))

    assert drafts == []
    assert db.query(PatientEmailDraft).count() == 0


def test_workflow_without_source_stage_matches_any_source(db, deal, stages):
    _workflow(db, stages, from_index=None, to_index=2)

    drafts = TriggerEvaluator(db).handle_stage_change(_event(deal, stages, from_index=1, to_index=2))

    assert len(drafts) == 1


def test_delay_mode_schedules_later(db, deal, stages):
    _workflow(db, stages, schedule=EmailSchedule(send_mode="delay", delay_minutes=45))
    now = datetime(2026, 3, 2, 9, 0)

    drafts = TriggerEvaluator(db).handle_stage_change(_event(deal, stages), now=now)

    assert drafts[0].scheduled_for == now + timedelta(minutes=45)


def test_recurring_mode_stores_recurrence(db, deal, stages):
    schedule = EmailSchedule(send_mode="recurring", recurring_every_days=7, recurring_times=3)
    _workflow(db, stages, schedule=schedule)
    now = datetime(2026, 3, 2, 9, 0)

    draft = TriggerEvaluator(db).handle_stage_change(_event(deal, stages), now=now)[0]

    assert draft.scheduled_for == now
    assert draft.recurring_every_days == 7
    assert draft.recurring_times == 3


def test_same_stage_move_fires_nothing(db, deal, stages):
    _workflow(db, stages, from_index=None, to_index=0)

    drafts = TriggerEvaluator(db).handle_stage_change(_event(deal, stages, 0, 0))

    assert drafts == []


def test_deal_without_patient_is_skipped(db, stages):
    _workflow(db, stages)
    deal = Deal(title="Walk-in", stage_id=stages[0].id)
    db.add(deal)
    db.commit()

    assert TriggerEvaluator(db).handle_stage_change(_event(deal, stages)) == []


def test_unknown_deal_raises(db, stages):
    _workflow(db, stages)
    event = StageChangeEvent(
        deal_id="missing", pipeline=None, from_stage_id=stages[0].id, to_stage_id=stages[1].id
    )

    with pytest.raises(NotFoundError):
        TriggerEvaluator(db).handle_stage_change(event)


def test_move_deal_endpoint_creates_drafts(client, db, deal, stages, patient):
    _workflow(db, stages)

    response = client.post(f"/deals/{deal.id}/move", json={"stage_id": stages[1].id})

    assert response.status_code == 200
    body = response.json()
    assert body["deal"]["stage_id"] == stages[1].id
    assert body["from_stage_id"] == stages[0].id
    assert len(body["drafts"]) == 1
    assert body["drafts"][0]["subject"] == "Hi Ana"

    drafts = client.get(f"/patients/{patient.id}/email-drafts").json()
    assert [d["id"] for d in drafts] == [body["drafts"][0]["id"]]


def test_move_to_same_stage_is_a_no_op(client, db, deal, stages):
    _workflow(db, stages, from_index=None, to_index=0)

    response = client.post(f"/deals/{deal.id}/move", json={"stage_id": stages[0].id})

    assert response.status_code == 200
    assert response.json()["drafts"] == []


def test_move_to_unknown_stage(client, deal):
    response = client.post(f"/deals/{deal.id}/move", json={"stage_id": "nope"})

    assert response.status_code == 400


def test_create_and_list_deals(client, patient, stages):
    response = client.post(
        "/deals",
        json={"title": "  Facelift  ", "patient_id": patient.id, "stage_id": stages[0].id, "pipeline": "Geneva"},
    )

    assert response.status_code == 201
    assert response.json()["title"] == "Facelift"

    listed = client.get("/deals", params={"pipeline": "Geneva"}).json()
    assert [d["title"] for d in listed] == ["Facelift"]
    assert client.get("/deals", params={"pipeline": "Zurich"}).json() == []
