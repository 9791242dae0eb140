from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from streamline.db.session import get_db
from streamline.core.context import OrgContext, get_org_context
from . import schemas, services

router = APIRouter()

@router.post("/", response_model=schemas.CommentOut)
def create_comment(
    comment: schemas.CommentCreate,
    db: Session = Depends(get_db),
    ctx: OrgContext = Depends(get_org_context)
):
    return services.create_comment(db, ctx, comment)

@router.get("/task/{task_id}", response_model=list[schemas.CommentOut])
def get_task_comments(
    task_id: int,
    db: Session = Depends(get_db),
    ctx: OrgContext = Depends(get_org_context)
):
    return services.get_comments_for_task(db, ctx, task_id)

@router.get("/{comment_id}", response_model=schemas.CommentOut)
def get_comment(
    comment_id: int,
    db: Session = Depends(get_db),
    ctx: OrgContext = Depends(get_org_context)
):
    return services.get_comment(db, ctx, comment_id)

@router.put("/{comment_id}", response_model=schemas.CommentOut)
def update_comment(
    comment_id: int,
    comment: schemas.CommentUpdate,
    db: Session = Depends(get_db),
    ctx: OrgContext = Depends(get_org_context)
):
    return services.update_comment(db, ctx, comment_id, comment)

@router.delete("/{comment_id}")
def delete_comment(
    comment_id: int,
    db: Session = Depends(get_db),
    ctx: OrgContext = Depends(get_org_context)
):
    services.delete_comment(db, ctx, comment_id)
    return {"success": True, "id": comment_id}
