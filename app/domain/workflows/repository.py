"""Workflow repository - Database operations for stages, workflows and their actions"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import DealStage, Workflow, WorkflowAction


class StageRepository:
    """Read-only access to the deal stage catalog"""

    @staticmethod
    def list_stages(db: Session) -> list[DealStage]:
        return db.query(DealStage).order_by(DealStage.sort_order.asc(), DealStage.name.asc()).all()

    @staticmethod
    def get_stage(db: Session, stage_id: str) -> Optional[DealStage]:
        return db.query(DealStage).filter(DealStage.id == stage_id).first()


class WorkflowRepository:
    """Repository for workflow database operations"""

    @staticmethod
    def list_workflows(db: Session, trigger_type: Optional[str] = None) -> list[Workflow]:
        """All workflows, oldest first"""
        query = db.query(Workflow)
        if trigger_type:
            query = query.filter(Workflow.trigger_type == trigger_type)
        return query.order_by(Workflow.created_at.asc(), Workflow.id.asc()).all()

    @staticmethod
    def get_workflow(db: Session, workflow_id: str) -> Optional[Workflow]:
        return db.query(Workflow).filter(Workflow.id == workflow_id).first()

    @staticmethod
    def create_workflow(db: Session, **workflow_data) -> Workflow:
        workflow = Workflow(**workflow_data)
        db.add(workflow)
        db.commit()
        db.refresh(workflow)
        return workflow

    @staticmethod
    def update_workflow(db: Session, workflow: Workflow, **updates) -> Workflow:
        """Apply updates; config is replaced as a whole so the JSON column is flagged dirty"""
        for key, value in updates.items():
            if hasattr(workflow, key):
                setattr(workflow, key, value)

        db.commit()
        db.refresh(workflow)
        return workflow

    @staticmethod
    def delete_workflow_with_actions(db: Session, workflow: Workflow) -> int:
        """
        Delete a workflow and every action attached to it in one transaction.
        Returns the number of actions removed.
        """
        try:
            removed = (
                db.query(WorkflowAction)
                .filter(WorkflowAction.workflow_id == workflow.id)
                .delete(synchronize_session=False)
            )
            db.delete(workflow)
            db.commit()
        except Exception:
            db.rollback()
            raise
        return removed

    @staticmethod
    def list_active_by_trigger(db: Session, trigger_type: str) -> list[Workflow]:
        return (
            db.query(Workflow)
            .filter(Workflow.trigger_type == trigger_type, Workflow.active.is_(True))
            .order_by(Workflow.created_at.asc(), Workflow.id.asc())
            .all()
        )


class ActionRepository:
    """Repository for workflow action database operations"""

    @staticmethod
    def find_action(db: Session, workflow_id: str, action_type: str) -> Optional[WorkflowAction]:
        return (
            db.query(WorkflowAction)
            .filter(
                WorkflowAction.workflow_id == workflow_id,
                WorkflowAction.action_type == action_type,
            )
            .order_by(WorkflowAction.sort_order.asc())
            .first()
        )

    @staticmethod
    def list_actions(db: Session, workflow_ids: Optional[list[str]] = None) -> list[WorkflowAction]:
        query = db.query(WorkflowAction)
        if workflow_ids is not None:
            query = query.filter(WorkflowAction.workflow_id.in_(workflow_ids))
        return query.order_by(WorkflowAction.sort_order.asc(), WorkflowAction.created_at.asc()).all()

    @staticmethod
    def create_action(db: Session, **action_data) -> WorkflowAction:
        action = WorkflowAction(**action_data)
        db.add(action)
        db.commit()
        db.refresh(action)
        return action

    @staticmethod
    def update_action_config(db: Session, action: WorkflowAction, config: dict) -> WorkflowAction:
        action.config = dict(config)
        db.commit()
        db.refresh(action)
        return action

    @staticmethod
    def delete_for_workflow(db: Session, workflow_id: str) -> int:
        removed = (
            db.query(WorkflowAction)
            .filter(WorkflowAction.workflow_id == workflow_id)
            .delete(synchronize_session=False)
        )
        db.commit()
        return removed
