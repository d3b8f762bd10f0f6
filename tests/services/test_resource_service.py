'''
Tests for ResourceService. Storage is the mocked StorageService.
'''
import pytest
from uuid import uuid4
from pprint import pprint
from fastapi import HTTPException
from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError

from src.tutor_desk_backend.services.resource_service import ResourceService, resource_matches
from src.tutor_desk_backend.common.config import settings
from src.tutor_desk_backend.common.exceptions import CascadeDeleteError, StorageError
from src.tutor_desk_backend.database import models as db_models
from src.tutor_desk_backend.models import resources as resource_models
from tests.database import factories


@pytest.fixture
async def test_subject_orm(db_session, test_teacher_orm) -> db_models.Subjects:
    subject = factories.SubjectFactory(teacher_id=test_teacher_orm.id)
    await db_session.flush()
    return subject


@pytest.mark.anyio
class TestSubjects:

    async def test_create_and_list_subjects(
        self,
        resource_service: ResourceService,
        test_teacher_orm: db_models.TeacherProfiles,
        test_unrelated_teacher_orm: db_models.TeacherProfiles
    ):
        print("\n--- Testing subject catalog ---")
        created = await resource_service.create_subject_for_api(
            resource_models.SubjectCreate(name="Fizik", objectives=[" Kuvvet ", "", "Enerji"]),
            test_teacher_orm
        )
        pprint(created.model_dump())
        assert created.objectives == ["Kuvvet", "Enerji"]

        await resource_service.create_subject_for_api(resource_models.SubjectCreate(name="Başka"), test_unrelated_teacher_orm)

        subjects = await resource_service.list_subjects_for_api(test_teacher_orm)
        assert [s.name for s in subjects] == ["Fizik"]

    async def test_delete_subject_removes_files_and_rows(
        self,
        db_session,
        resource_service: ResourceService,
        mock_storage_service,
        test_teacher_orm: db_models.TeacherProfiles,
        test_subject_orm: db_models.Subjects
    ):
        print("\n--- Testing delete_subject cascade ---")
        factories.LessonResourceFactory(subject=test_subject_orm, file_url="t/a.pdf")
        factories.LessonResourceFactory(subject=test_subject_orm, file_url=None, link_url="https://example.com")
        await db_session.flush()

        assert await resource_service.delete_subject(test_subject_orm.id, test_teacher_orm) is True

        mock_storage_service.remove.assert_awaited_once_with(settings.RESOURCE_BUCKET, "t/a.pdf")
        remaining = await db_session.scalar(select(func.count()).select_from(db_models.LessonResources))
        assert remaining == 0

    async def test_delete_subject_tolerates_missing_file(
        self,
        db_session,
        resource_service: ResourceService,
        mock_storage_service,
        test_teacher_orm: db_models.TeacherProfiles,
        test_subject_orm: db_models.Subjects
    ):
        factories.LessonResourceFactory(subject=test_subject_orm, file_url="t/gone.pdf")
        await db_session.flush()
        # remove() reports an already deleted object as False
        mock_storage_service.remove.return_value = False

        assert await resource_service.delete_subject(test_subject_orm.id, test_teacher_orm) is True

    async def test_delete_subject_storage_failure_is_cascade_error(
        self,
        db_session,
        resource_service: ResourceService,
        mock_storage_service,
        test_teacher_orm: db_models.TeacherProfiles,
        test_subject_orm: db_models.Subjects
    ):
        factories.LessonResourceFactory(subject=test_subject_orm, file_url="t/a.pdf")
        await db_session.flush()
        mock_storage_service.remove.side_effect = StorageError("down", status_code=500)

        with pytest.raises(CascadeDeleteError):
            await resource_service.delete_subject(test_subject_orm.id, test_teacher_orm)

    async def test_delete_foreign_subject_is_404(
        self,
        db_session,
        resource_service: ResourceService,
        test_teacher_orm: db_models.TeacherProfiles,
        test_unrelated_teacher_orm: db_models.TeacherProfiles
    ):
        foreign = factories.SubjectFactory(teacher_id=test_unrelated_teacher_orm.id)
        await db_session.flush()
        with pytest.raises(HTTPException) as e:
            await resource_service.delete_subject(foreign.id, test_teacher_orm)
        assert e.value.status_code == 404


@pytest.mark.anyio
class TestResources:

    async def test_create_resource_with_file(
        self,
        resource_service: ResourceService,
        mock_storage_service,
        test_teacher_orm: db_models.TeacherProfiles,
        test_subject_orm: db_models.Subjects
    ):
        print("\n--- Testing create_resource_for_api with a file ---")
        data = resource_models.ResourceCreate(subject_id=test_subject_orm.id, title="Türev notları", tags=["türev", " "])
        created = await resource_service.create_resource_for_api(
            data, test_teacher_orm, filename="türev notları.pdf", content=b"%PDF", content_type="application/pdf"
        )
        pprint(created.model_dump())

        assert created.tags == ["türev"]
        assert created.file_url.startswith(f"{test_teacher_orm.id}/")
        assert created.file_url.endswith(".pdf")
        mock_storage_service.upload.assert_awaited_once()
        assert mock_storage_service.upload.await_args.args[0] == settings.RESOURCE_BUCKET

    async def test_failed_insert_removes_uploaded_file(
        self,
        mocker,
        db_session,
        resource_service: ResourceService,
        mock_storage_service,
        test_teacher_orm: db_models.TeacherProfiles,
        test_subject_orm: db_models.Subjects
    ):
        mocker.patch.object(db_session, "flush", side_effect=SQLAlchemyError("insert failed"))
        data = resource_models.ResourceCreate(subject_id=test_subject_orm.id, title="Integral")

        with pytest.raises(SQLAlchemyError):
            await resource_service.create_resource_for_api(
                data, test_teacher_orm, filename="integral.pdf", content=b"%PDF", content_type="application/pdf"
            )

        uploaded_path = mock_storage_service.upload.await_args.args[1]
        mock_storage_service.remove.assert_awaited_once_with(settings.RESOURCE_BUCKET, uploaded_path)

    async def test_create_link_only_resource_skips_upload(
        self,
        resource_service: ResourceService,
        mock_storage_service,
        test_teacher_orm: db_models.TeacherProfiles,
        test_subject_orm: db_models.Subjects
    ):
        data = resource_models.ResourceCreate(subject_id=test_subject_orm.id, title="Video", link_url="https://example.com/v")
        created = await resource_service.create_resource_for_api(data, test_teacher_orm)
        assert created.file_url is None
        mock_storage_service.upload.assert_not_awaited()

    async def test_create_under_unknown_subject_is_404(
        self,
        resource_service: ResourceService,
        test_teacher_orm: db_models.TeacherProfiles
    ):
        data = resource_models.ResourceCreate(subject_id=uuid4(), title="X")
        with pytest.raises(HTTPException) as e:
            await resource_service.create_resource_for_api(data, test_teacher_orm)
        assert e.value.status_code == 404

    async def test_list_with_search(
        self,
        db_session,
        resource_service: ResourceService,
        test_teacher_orm: db_models.TeacherProfiles,
        test_subject_orm: db_models.Subjects
    ):
        factories.LessonResourceFactory(subject=test_subject_orm, title="İntegral", tags=["analiz"])
        factories.LessonResourceFactory(subject=test_subject_orm, title="Vektörler", description="Analitik geometri")
        factories.LessonResourceFactory(subject=test_subject_orm, title="Olasılık")
        await db_session.flush()

        found = await resource_service.list_resources_for_api(test_teacher_orm, subject_id=test_subject_orm.id, search="ANALI")
        assert sorted(r.title for r in found) == ["Vektörler", "İntegral"]

        found = await resource_service.list_resources_for_api(test_teacher_orm, search="olasılık")
        assert [r.title for r in found] == ["Olasılık"]

        assert len(await resource_service.list_resources_for_api(test_teacher_orm)) == 3

    async def test_download_without_file_is_404(
        self,
        db_session,
        resource_service: ResourceService,
        test_teacher_orm: db_models.TeacherProfiles,
        test_subject_orm: db_models.Subjects
    ):
        resource = factories.LessonResourceFactory(subject=test_subject_orm, file_url=None)
        await db_session.flush()
        with pytest.raises(HTTPException) as e:
            await resource_service.download_resource(resource.id, test_teacher_orm)
        assert e.value.status_code == 404

    async def test_download_returns_content_and_name(
        self,
        db_session,
        resource_service: ResourceService,
        test_teacher_orm: db_models.TeacherProfiles,
        test_subject_orm: db_models.Subjects
    ):
        resource = factories.LessonResourceFactory(subject=test_subject_orm, title="Notlar", file_url="t/abc_notes.pdf")
        await db_session.flush()

        content, name = await resource_service.download_resource(resource.id, test_teacher_orm)
        assert content == b"file-content"
        assert name == "Notlar_abc_notes.pdf"


class TestResourceMatches:

    def test_blank_search_matches_everything(self):
        resource = factories.LessonResourceFactory.build(title="X", tags=[])
        assert resource_matches(resource, None)
        assert resource_matches(resource, "   ")

    def test_tag_match(self):
        resource = factories.LessonResourceFactory.build(title="X", description=None, tags=["Türev"])
        assert resource_matches(resource, "türev")
        assert not resource_matches(resource, "integral")
