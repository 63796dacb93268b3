"""Onboarding repository - Database operations for wizard drafts"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...models import OnboardingDraft


class OnboardingDraftRepository:
    """Repository for onboarding draft database operations"""

    @staticmethod
    def get_draft(db: Session, user_id: str) -> Optional[OnboardingDraft]:
        return db.query(OnboardingDraft).filter(OnboardingDraft.user_id == user_id).first()

    @staticmethod
    def save_draft(db: Session, user_id: str, current_step: str, form_data: dict) -> OnboardingDraft:
        """Create or replace the user's draft"""
        draft = OnboardingDraftRepository.get_draft(db, user_id)
        if draft is None:
            draft = OnboardingDraft(user_id=user_id)
            db.add(draft)

        draft.current_step = current_step
        draft.form_data = form_data
        db.commit()
        db.refresh(draft)
        return draft

    @staticmethod
    def delete_draft(db: Session, user_id: str) -> bool:
        deleted = db.query(OnboardingDraft).filter(OnboardingDraft.user_id == user_id).delete()
        db.commit()
        return deleted > 0

    @staticmethod
    def purge_older_than(db: Session, cutoff: datetime) -> int:
        """Delete drafts not touched since cutoff"""
        deleted = (
            db.query(OnboardingDraft)
            .filter(OnboardingDraft.updated_at < cutoff)
            .delete(synchronize_session=False)
        )
        db.commit()
        return deleted
