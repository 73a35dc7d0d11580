import uuid

from fastapi import APIRouter, Depends, Response, status

from app.dependencies import PaginationParams, get_current_user_id, get_post_service
from app.schemas import (
    ErrorResponse,
    PostCreate,
    PostEnvelope,
    PostListEnvelope,
    PostResponse,
    PostUpdate,
)
from app.services.post_service import PostService

router = APIRouter(
    prefix="/api/posts",
    tags=["posts"],
    dependencies=[Depends(get_current_user_id)],
    responses={
        401: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)

@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=PostEnvelope,
    responses={409: {"model": ErrorResponse}},
)
async def create_post(
    data: PostCreate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: PostService = Depends(get_post_service),
):
    post = await service.create(data, user_id)
    return PostEnvelope(data=PostResponse.model_validate(post))

@router.get("", response_model=PostListEnvelope)
async def list_posts(
    pagination: PaginationParams = Depends(),
    service: PostService = Depends(get_post_service),
):
    posts = await service.find_page(pagination.page, pagination.limit)
    return PostListEnvelope(
        results=len(posts),
        data=[PostResponse.model_validate(p) for p in posts],
    )

@router.get(
    "/{post_id}",
    response_model=PostEnvelope,
    responses={404: {"model": ErrorResponse}},
)
async def get_post(post_id: str, service: PostService = Depends(get_post_service)):
    post = await service.find_by_id(post_id)
    return PostEnvelope(data=PostResponse.model_validate(post))

@router.put(
    "/{post_id}",
    response_model=PostEnvelope,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_post(
    post_id: str,
    data: PostUpdate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: PostService = Depends(get_post_service),
):
    post = await service.update(post_id, data, user_id)
    return PostEnvelope(data=PostResponse.model_validate(post))

@router.delete(
    "/{post_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def delete_post(
    post_id: str,
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: PostService = Depends(get_post_service),
):
    await service.delete(post_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
