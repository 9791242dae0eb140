from sqlalchemy.orm import Session

from streamline.api.board.task.ordering import get_scoped_task
from streamline.core.context import OrgContext
from streamline.core.errors import Forbidden, NotFound
from streamline.db.models.board.comment import Comment
from streamline.db.models.board.project import Project
from streamline.db.models.board.task import Task
from . import schemas

def create_comment(db: Session, ctx: OrgContext, comment: schemas.CommentCreate):
    task = get_scoped_task(db, ctx, comment.task_id)
    db_comment = Comment(content=comment.content, task_id=task.id, author_id=ctx.user_id)
    db.add(db_comment)
    db.commit()
    db.refresh(db_comment)
    return db_comment

def get_comment(db: Session, ctx: OrgContext, comment_id: int):
    comment = db.query(Comment).join(Comment.task).join(Task.project).filter(
        Comment.id == comment_id,
        Project.organization_id == ctx.organization_id
    ).first()
    if not comment:
        raise NotFound("Comment not found")
    return comment

def get_comments_for_task(db: Session, ctx: OrgContext, task_id: int):
    task = get_scoped_task(db, ctx, task_id)
    return db.query(Comment).filter(Comment.task_id == task.id).order_by(
        Comment.created_at.desc(), Comment.id.desc()
    ).all()

def _own_comment(db: Session, ctx: OrgContext, comment_id: int, action: str):
    comment = get_comment(db, ctx, comment_id)
    if comment.author_id != ctx.user_id:
        raise Forbidden(f"You can only {action} your own comments")
    return comment

def update_comment(db: Session, ctx: OrgContext, comment_id: int, comment: schemas.CommentUpdate):
    db_comment = _own_comment(db, ctx, comment_id, "edit")
    db_comment.content = comment.content
    db.commit()
    db.refresh(db_comment)
    return db_comment

def delete_comment(db: Session, ctx: OrgContext, comment_id: int):
    db_comment = _own_comment(db, ctx, comment_id, "delete")
    db.delete(db_comment)
    db.commit()
