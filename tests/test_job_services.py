import pytest

from hvacdesk.db.models.invoice import Invoice
from hvacdesk.db.models.report import Report, ReportPhoto
from hvacdesk.schemas.invoice import InvoiceCreate
from hvacdesk.schemas.job import JobCreate, JobListParams, JobStatus, JobUpdate
from hvacdesk.schemas.report import PhotoUpload
from hvacdesk.services.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidTransitionError,
    JobNotFoundError,
    ValidationError,
)


def _client_job(job_service, db, actors, title="AC repair"):
    return job_service.create_job(actors.client, JobCreate(title=title, description="unit leaking"), db)


def _assigned_job(job_service, db, actors):
    job = _client_job(job_service, db, actors)
    return job_service.assign_technician(actors.admin, job.id, actors.tech.id, db)


# ---------------------------------------------------------------------------
# createJob
# ---------------------------------------------------------------------------

def test_client_creates_job_for_themself(db, actors, job_service, numbering):
    job = _client_job(job_service, db, actors)

    assert job.status == JobStatus.TO_ASSIGN.value
    assert job.technician_id is None
    assert job.client_id == actors.client.id
    assert job.priority == 2
    assert numbering.job_pattern.match(job.external_number)


def test_client_cannot_create_job_for_another_client(db, actors, job_service):
    with pytest.raises(ForbiddenError):
        job_service.create_job(actors.client, JobCreate(client_id=actors.other_client.id, title="x"), db)


def test_client_cannot_pick_a_technician(db, actors, job_service):
    with pytest.raises(ForbiddenError):
        job_service.create_job(actors.client, JobCreate(technician_id=actors.tech.id, title="x"), db)


def test_technician_cannot_create_jobs(db, actors, job_service):
    with pytest.raises(ForbiddenError):
        job_service.create_job(actors.tech, JobCreate(client_id=actors.client.id, title="x"), db)


def test_admin_must_name_a_client(db, actors, job_service):
    with pytest.raises(ValidationError) as exc:
        job_service.create_job(actors.admin, JobCreate(title="x"), db)
    assert exc.value.details["field"] == "client_id"


def test_admin_client_reference_must_be_a_client(db, actors, job_service):
    with pytest.raises(ValidationError):
        job_service.create_job(actors.admin, JobCreate(client_id=actors.tech.id, title="x"), db)
    with pytest.raises(ValidationError):
        job_service.create_job(actors.admin, JobCreate(client_id=9999, title="x"), db)


def test_admin_initial_status_depends_on_technician(db, actors, job_service):
    waiting = job_service.create_job(actors.admin, JobCreate(client_id=actors.client.id, title="x"), db)
    assigned = job_service.create_job(
        actors.admin, JobCreate(client_id=actors.client.id, technician_id=actors.tech.id, title="y"), db
    )

    assert waiting.status == JobStatus.WAITING.value
    assert waiting.technician_id is None
    assert assigned.status == JobStatus.ASSIGNED.value
    assert assigned.technician_id == actors.tech.id


def test_admin_technician_reference_must_be_a_technician(db, actors, job_service):
    with pytest.raises(ValidationError):
        job_service.create_job(
            actors.admin, JobCreate(client_id=actors.client.id, technician_id=actors.other_client.id, title="x"), db
        )


def test_service_type_fills_title_and_description(db, actors, job_service):
    job = job_service.create_job(actors.client, JobCreate(service_type="ac_service"), db)

    assert job.service_type == "AC_SERVICE"
    assert job.title == "Air conditioning service"
    assert job.description


def test_unknown_service_type_is_rejected(db, actors, job_service):
    with pytest.raises(ValidationError):
        job_service.create_job(actors.client, JobCreate(service_type="CHIMNEY_SWEEP", title="x"), db)


def test_title_is_required_without_service_type(db, actors, job_service):
    with pytest.raises(ValidationError):
        job_service.create_job(actors.client, JobCreate(title="   "), db)


# ---------------------------------------------------------------------------
# getJob
# ---------------------------------------------------------------------------

def test_get_job_is_scoped_by_role(db, actors, job_service):
    job = _assigned_job(job_service, db, actors)

    assert job_service.get_job(actors.admin, job.id).id == job.id
    assert job_service.get_job(actors.client, job.id).id == job.id
    assert job_service.get_job(actors.tech, job.id).id == job.id
    with pytest.raises(ForbiddenError):
        job_service.get_job(actors.other_client, job.id)
    with pytest.raises(ForbiddenError):
        job_service.get_job(actors.other_tech, job.id)
    with pytest.raises(JobNotFoundError):
        job_service.get_job(actors.admin, 9999)


# ---------------------------------------------------------------------------
# updateJob: technician
# ---------------------------------------------------------------------------

def test_assigned_technician_moves_job_to_done(db, actors, job_service):
    job = _assigned_job(job_service, db, actors)

    job = job_service.update_job(actors.tech, job.id, JobUpdate(status=JobStatus.IN_PROGRESS), db)
    assert job.status == JobStatus.IN_PROGRESS.value

    job = job_service.update_job(actors.tech, job.id, JobUpdate(status=JobStatus.DONE), db)
    assert job.status == JobStatus.DONE.value
    assert job.completed_at is not None


def test_other_technician_is_forbidden(db, actors, job_service):
    job = _assigned_job(job_service, db, actors)

    for status in (JobStatus.IN_PROGRESS, JobStatus.DONE):
        with pytest.raises(ForbiddenError):
            job_service.update_job(actors.other_tech, job.id, JobUpdate(status=status), db)


@pytest.mark.parametrize("status", [JobStatus.WAITING, JobStatus.TO_ASSIGN, JobStatus.ASSIGNED])
def test_technician_cannot_move_job_back(db, actors, job_service, status):
    job = _assigned_job(job_service, db, actors)
    job_service.update_job(actors.tech, job.id, JobUpdate(status=JobStatus.IN_PROGRESS), db)

    with pytest.raises(ValidationError):
        job_service.update_job(actors.tech, job.id, JobUpdate(status=status), db)


def test_technician_may_only_change_status(db, actors, job_service):
    job = _assigned_job(job_service, db, actors)

    with pytest.raises(ForbiddenError):
        job_service.update_job(actors.tech, job.id, JobUpdate(status=JobStatus.IN_PROGRESS, priority=1), db)
    with pytest.raises(ValidationError):
        job_service.update_job(actors.tech, job.id, JobUpdate(), db)


def test_technician_cannot_reopen_finished_job(db, actors, job_service):
    job = _assigned_job(job_service, db, actors)
    job_service.update_job(actors.tech, job.id, JobUpdate(status=JobStatus.CANCELLED), db)

    with pytest.raises(ConflictError):
        job_service.update_job(actors.tech, job.id, JobUpdate(status=JobStatus.IN_PROGRESS), db)


def test_client_cannot_update_jobs(db, actors, job_service):
    job = _client_job(job_service, db, actors)
    with pytest.raises(ForbiddenError):
        job_service.update_job(actors.client, job.id, JobUpdate(title="changed"), db)


# ---------------------------------------------------------------------------
# updateJob: admin
# ---------------------------------------------------------------------------

def test_admin_edits_fields_without_touching_external_number(db, actors, job_service):
    job = _client_job(job_service, db, actors)
    number = job.external_number

    job = job_service.update_job(actors.admin, job.id, JobUpdate(title="Replace compressor", priority=1, address="Main St 1"), db)

    assert job.title == "Replace compressor"
    assert job.priority == 1
    assert job.external_number == number


def test_admin_status_moves_follow_the_table(db, actors, job_service):
    job = _assigned_job(job_service, db, actors)
    job = job_service.update_job(actors.admin, job.id, JobUpdate(status=JobStatus.IN_PROGRESS), db)

    with pytest.raises(InvalidTransitionError):
        job_service.update_job(actors.admin, job.id, JobUpdate(status=JobStatus.WAITING), db)

    job = job_service.update_job(actors.admin, job.id, JobUpdate(status=JobStatus.DONE), db)
    assert job.completed_at is not None

    with pytest.raises(ConflictError):
        job_service.update_job(actors.admin, job.id, JobUpdate(status=JobStatus.WAITING), db)


def test_admin_same_status_is_a_noop(db, actors, job_service):
    job = _client_job(job_service, db, actors)
    job = job_service.update_job(actors.admin, job.id, JobUpdate(status=JobStatus.TO_ASSIGN), db)
    assert job.status == JobStatus.TO_ASSIGN.value


def test_staffed_statuses_need_a_technician(db, actors, job_service):
    job = _client_job(job_service, db, actors)
    with pytest.raises(ValidationError):
        job_service.update_job(actors.admin, job.id, JobUpdate(status=JobStatus.IN_PROGRESS), db)

    job = _assigned_job(job_service, db, actors)
    with pytest.raises(ValidationError):
        job_service.update_job(actors.admin, job.id, JobUpdate(technician_id=None), db)


def test_admin_can_cancel_unstaffed_job(db, actors, job_service):
    job = _client_job(job_service, db, actors)
    job = job_service.update_job(actors.admin, job.id, JobUpdate(status=JobStatus.CANCELLED), db)
    assert job.status == JobStatus.CANCELLED.value


@pytest.mark.parametrize("client_created", [False, True])
def test_setting_technician_through_update_assigns_job(db, actors, job_service, client_created):
    if client_created:
        job = _client_job(job_service, db, actors)
        assert job.status == JobStatus.TO_ASSIGN.value
    else:
        job = job_service.create_job(actors.admin, JobCreate(client_id=actors.client.id, title="AC repair"), db)
        assert job.status == JobStatus.WAITING.value

    job = job_service.update_job(actors.admin, job.id, JobUpdate(technician_id=actors.tech.id), db)
    assert job.technician_id == actors.tech.id
    assert job.status == JobStatus.ASSIGNED.value

    job = job_service.update_job(actors.tech, job.id, JobUpdate(status=JobStatus.IN_PROGRESS), db)
    assert job.status == JobStatus.IN_PROGRESS.value


def test_client_id_is_immutable(db, actors, job_service):
    job = _client_job(job_service, db, actors)

    with pytest.raises(ConflictError):
        job_service.update_job(actors.admin, job.id, JobUpdate(client_id=actors.other_client.id), db)

    same = job_service.update_job(actors.admin, job.id, JobUpdate(client_id=actors.client.id, title="ok"), db)
    assert same.client_id == actors.client.id
    assert same.title == "ok"


def test_update_missing_job(db, actors, job_service):
    with pytest.raises(JobNotFoundError):
        job_service.update_job(actors.admin, 9999, JobUpdate(title="x"), db)


# ---------------------------------------------------------------------------
# assignTechnician
# ---------------------------------------------------------------------------

def test_assignment_always_results_in_assigned(db, actors, job_service):
    job = _assigned_job(job_service, db, actors)
    job_service.update_job(actors.tech, job.id, JobUpdate(status=JobStatus.IN_PROGRESS), db)

    job = job_service.assign_technician(actors.admin, job.id, actors.other_tech.id, db)
    assert job.status == JobStatus.ASSIGNED.value
    assert job.technician_id == actors.other_tech.id

    job_service.update_job(actors.other_tech, job.id, JobUpdate(status=JobStatus.DONE), db)
    job = job_service.assign_technician(actors.admin, job.id, actors.tech.id, db)
    assert job.status == JobStatus.ASSIGNED.value
    assert job.completed_at is None


def test_assignment_requires_technician_id(db, actors, job_service):
    job = _client_job(job_service, db, actors)
    with pytest.raises(ValidationError):
        job_service.assign_technician(actors.admin, job.id, None, db)
    with pytest.raises(ValidationError):
        job_service.assign_technician(actors.admin, job.id, actors.client.id, db)


def test_only_admin_assigns(db, actors, job_service):
    job = _client_job(job_service, db, actors)
    with pytest.raises(ForbiddenError):
        job_service.assign_technician(actors.tech, job.id, actors.tech.id, db)


# ---------------------------------------------------------------------------
# deleteJob
# ---------------------------------------------------------------------------

def test_delete_job_removes_reports_photos_and_detaches_invoices(
    db, actors, job_service, invoice_service, report_service, storage, png_bytes
):
    job = _assigned_job(job_service, db, actors)
    report = report_service.create_report(
        actors.tech, job.id, "done", [PhotoUpload(filename="unit.png", content_type="image/png", data=png_bytes)], db
    )
    invoice = invoice_service.create_invoice(
        actors.admin, InvoiceCreate(client_id=actors.client.id, job_id=job.id, amount="99.00"), db
    )
    stored = storage.root / report.photos[0].file_path
    assert stored.exists()

    job_service.delete_job(actors.admin, job.id, db)
    db.expire_all()

    assert db.get(Report, report.id) is None
    assert db.query(ReportPhoto).count() == 0
    assert db.get(Invoice, invoice.id).job_id is None
    assert not stored.exists()
    with pytest.raises(JobNotFoundError):
        job_service.get_job(actors.admin, job.id)


def test_delete_job_is_admin_only(db, actors, job_service):
    job = _client_job(job_service, db, actors)
    with pytest.raises(ForbiddenError):
        job_service.delete_job(actors.client, job.id, db)
    with pytest.raises(JobNotFoundError):
        job_service.delete_job(actors.admin, 9999, db)


# ---------------------------------------------------------------------------
# listJobs
# ---------------------------------------------------------------------------

def test_list_jobs_is_scoped_by_role(db, actors, job_service):
    mine = _assigned_job(job_service, db, actors)
    job_service.create_job(actors.other_client, JobCreate(title="Other"), db)

    client_page = job_service.list_jobs(actors.client, JobListParams())
    tech_page = job_service.list_jobs(actors.tech, JobListParams(client_id=actors.other_client.id))
    other_tech_page = job_service.list_jobs(actors.other_tech, JobListParams())
    admin_page = job_service.list_jobs(actors.admin, JobListParams())

    assert [j.id for j in client_page.jobs] == [mine.id]
    assert [j.id for j in tech_page.jobs] == [mine.id]
    assert other_tech_page.meta.total == 0
    assert admin_page.meta.total == 2


def test_list_jobs_filters_search_sort_and_pages(db, actors, job_service):
    for i, priority in enumerate([3, 1, 2]):
        job_service.create_job(actors.client, JobCreate(title=f"Boiler {i}", priority=priority), db)
    job_service.create_job(actors.client, JobCreate(title="Air duct"), db)

    page = job_service.list_jobs(actors.admin, JobListParams(q="boiler", sort="priority", order="asc", limit=2))
    assert page.meta.total == 3
    assert page.meta.limit == 2
    assert [j.priority for j in page.jobs] == [1, 2]

    page2 = job_service.list_jobs(actors.admin, JobListParams(q="boiler", sort="priority", order="asc", limit=2, page=2))
    assert [j.priority for j in page2.jobs] == [3]

    by_status = job_service.list_jobs(actors.admin, JobListParams(status=JobStatus.WAITING))
    assert by_status.meta.total == 0


def test_list_jobs_caps_limit_and_ignores_unknown_sort(db, actors, job_service):
    _client_job(job_service, db, actors)
    page = job_service.list_jobs(actors.admin, JobListParams(limit=5000, sort="drop table"))
    assert page.meta.limit == 200
    assert page.meta.total == 1
