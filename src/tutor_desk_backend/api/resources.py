'''
API endpoints for subjects and lesson resources.
'''
from typing import Annotated, List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, File, Form, UploadFile, status, Response
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from ..database import models as db_models
from ..core.documents import attachment_headers
from ..models import resources as resource_models
from ..services.security import get_current_teacher
from ..services.resource_service import ResourceService


class SubjectsAPI:
    """
    A class to encapsulate the subject catalog endpoints.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/subjects",
            tags=["Resources"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
                "/",
                self.list_subjects,
                methods=["GET"],
                response_model=List[resource_models.SubjectRead])

        self.router.add_api_route(
                "/",
                self.create_subject,
                methods=["POST"],
                status_code=status.HTTP_201_CREATED,
                response_model=resource_models.SubjectRead)

        self.router.add_api_route(
                "/{subject_id}",
                self.delete_subject,
                methods=["DELETE"],
                status_code=status.HTTP_204_NO_CONTENT)

    async def list_subjects(
        self,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        resource_service: Annotated[ResourceService, Depends(ResourceService)]
    ):
        return await resource_service.list_subjects_for_api(teacher)

    async def create_subject(
        self,
        subject_data: resource_models.SubjectCreate,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        resource_service: Annotated[ResourceService, Depends(ResourceService)]
    ):
        return await resource_service.create_subject_for_api(subject_data, teacher)

    async def delete_subject(
        self,
        subject_id: UUID,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        resource_service: Annotated[ResourceService, Depends(ResourceService)]
    ):
        """
        Deletes the subject together with every resource filed under it.
        """
        await resource_service.delete_subject(subject_id, teacher)
        return Response(status_code=status.HTTP_204_NO_CONTENT)


class ResourcesAPI:
    """
    A class to encapsulate the lesson resource endpoints.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/resources",
            tags=["Resources"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
                "/",
                self.list_resources,
                methods=["GET"],
                response_model=List[resource_models.ResourceRead])

        self.router.add_api_route(
                "/",
                self.create_resource,
                methods=["POST"],
                status_code=status.HTTP_201_CREATED,
                response_model=resource_models.ResourceRead)

        self.router.add_api_route(
                "/{resource_id}/download",
                self.download_resource,
                methods=["GET"])

        self.router.add_api_route(
                "/{resource_id}",
                self.delete_resource,
                methods=["DELETE"],
                status_code=status.HTTP_204_NO_CONTENT)

    async def list_resources(
        self,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        resource_service: Annotated[ResourceService, Depends(ResourceService)],
        subject_id: Optional[UUID] = None,
        search: Optional[str] = None
    ):
        """
        Newest first. `search` matches title, description and tags.
        """
        return await resource_service.list_resources_for_api(teacher, subject_id, search)

    async def create_resource(
        self,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        resource_service: Annotated[ResourceService, Depends(ResourceService)],
        subject_id: Annotated[UUID, Form()],
        title: Annotated[str, Form()],
        description: Annotated[Optional[str], Form()] = None,
        link_url: Annotated[Optional[str], Form()] = None,
        tags: Annotated[List[str], Form()] = [],
        file: Annotated[Optional[UploadFile], File()] = None
    ):
        """
        Multipart form: the resource fields plus an optional file.
        """
        try:
            resource_data = resource_models.ResourceCreate(
                subject_id=subject_id,
                title=title,
                description=description,
                link_url=link_url,
                tags=tags,
            )
        except ValidationError as e:
            raise RequestValidationError(e.errors())

        content = await file.read() if file is not None else None
        return await resource_service.create_resource_for_api(
            resource_data,
            teacher,
            filename=file.filename if file is not None else None,
            content=content,
            content_type=file.content_type if file is not None else None,
        )

    async def download_resource(
        self,
        resource_id: UUID,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        resource_service: Annotated[ResourceService, Depends(ResourceService)]
    ):
        content, filename = await resource_service.download_resource(resource_id, teacher)
        return Response(
            content=content,
            media_type="application/octet-stream",
            headers=attachment_headers(filename)
        )

    async def delete_resource(
        self,
        resource_id: UUID,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        resource_service: Annotated[ResourceService, Depends(ResourceService)]
    ):
        await resource_service.delete_resource(resource_id, teacher)
        return Response(status_code=status.HTTP_204_NO_CONTENT)


# Instantiate and combine routers
subjects_api = SubjectsAPI()
resources_api = ResourcesAPI()

router = APIRouter()
router.include_router(subjects_api.router)
router.include_router(resources_api.router)
