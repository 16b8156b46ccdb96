from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from gamenet.db.session import get_db
from gamenet.api.deps import require_roles
from gamenet.core import errors
from gamenet.models.user import User
from gamenet.schemas.venue import TaxSettingsUpdate
from gamenet.services.settings_service import get_tax_settings, set_tax_settings

router = APIRouter(tags=["admin"])

@router.get("/admin/settings/tax")
def read_tax_settings(db: Session = Depends(get_db), me: User = Depends(require_roles("admin"))):
    return get_tax_settings(db).as_dict()

@router.put("/admin/settings/tax")
def update_tax_settings(body: TaxSettingsUpdate, db: Session = Depends(get_db), me: User = Depends(require_roles("admin"))):
    try:
        return set_tax_settings(db, enabled=body.taxEnabled, rate=body.taxRate).as_dict()
    except errors.DomainError as e:
        raise errors.to_http(e)
