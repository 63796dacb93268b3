"""Account repository - Database operations for portal preferences"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import UserPreference

# API field -> column
PREFERENCE_COLUMNS = {
    "darkMode": "dark_mode",
    "emailNotifications": "email_notifications",
    "smsNotifications": "sms_notifications",
}


class PreferenceRepository:
    """Repository for user preference database operations"""

    @staticmethod
    def get(db: Session, user_id: str) -> Optional[UserPreference]:
        return db.query(UserPreference).filter(UserPreference.user_id == user_id).first()

    @staticmethod
    def upsert(db: Session, user_id: str, changes: dict) -> UserPreference:
        preference = PreferenceRepository.get(db, user_id)
        if preference is None:
            preference = UserPreference(
                user_id=user_id, dark_mode=False, email_notifications=True, sms_notifications=False
            )
            db.add(preference)

        for field, value in changes.items():
            setattr(preference, PREFERENCE_COLUMNS[field], value)

        db.commit()
        db.refresh(preference)
        return preference

    @staticmethod
    def delete(db: Session, user_id: str) -> bool:
        deleted = db.query(UserPreference).filter(UserPreference.user_id == user_id).delete()
        db.commit()
        return deleted > 0
