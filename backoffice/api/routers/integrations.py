# backoffice/api/routers/integrations.py
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from backoffice.data.database import get_db
from backoffice.domain.enums import IntegrationType
from backoffice.domain.schemas import (
    ExchangeCodeIn,
    FacebookPostIn,
    GenerateButtonLinkIn,
    GenerateLinkIn,
    IntegrationCreate,
    IntegrationOut,
    IntegrationUpdate,
    SendDataIn,
    SendMessageIn,
)
from backoffice.services.facebook_service import FacebookService
from backoffice.services.integration_service import IntegrationService
from backoffice.services.keitaro_service import KeitaroService
from backoffice.services.telegram_service import TelegramService

router = APIRouter(prefix="/integrations", tags=["integrations"])


def get_service(db: Session):
    return IntegrationService(db)


@router.post("/", response_model=IntegrationOut, status_code=201)
def create_integration(payload: IntegrationCreate, db: Session = Depends(get_db)):
    svc = get_service(db)
    return svc.to_dict(svc.create(payload))


@router.get("/", response_model=List[IntegrationOut])
def list_integrations(include_inactive: bool = Query(False), db: Session = Depends(get_db)):
    svc = get_service(db)
    return [svc.to_dict(i) for i in svc.list(include_inactive)]


@router.get("/statistics")
def statistics(db: Session = Depends(get_db)):
    return get_service(db).statistics()


@router.get("/type/{type}", response_model=List[IntegrationOut])
def find_by_type(type: IntegrationType, include_inactive: bool = Query(False), db: Session = Depends(get_db)):
    svc = get_service(db)
    return [svc.to_dict(i) for i in svc.find_by_type(type.value, include_inactive)]


@router.get("/type/{type}/active", response_model=List[IntegrationOut])
def find_active_by_type(type: IntegrationType, db: Session = Depends(get_db)):
    svc = get_service(db)
    return [svc.to_dict(i) for i in svc.find_active_by_type(type.value)]


# ---------------------------------------------------------------------------
# Telegram
# ---------------------------------------------------------------------------

@router.post("/telegram/send-message")
def telegram_send_message(payload: SendMessageIn, db: Session = Depends(get_db)):
    integration = get_service(db).get(payload.integration_id)
    return TelegramService(db).send_message(integration, payload.message, payload.group_id, payload.options)


@router.get("/{integration_id}/telegram/bot-info")
def telegram_bot_info(integration_id: int, db: Session = Depends(get_db)):
    integration = get_service(db).get(integration_id)
    return TelegramService(db).get_bot_info(integration)


@router.get("/{integration_id}/telegram/chat-info")
def telegram_chat_info(integration_id: int, chat_id: str | None = Query(None), db: Session = Depends(get_db)):
    integration = get_service(db).get(integration_id)
    return TelegramService(db).get_chat_info(integration, chat_id)


# ---------------------------------------------------------------------------
# Keitaro
# ---------------------------------------------------------------------------

@router.post("/keitaro/generate-link")
def keitaro_generate_link(payload: GenerateLinkIn, db: Session = Depends(get_db)):
    integration = get_service(db).get(payload.integration_id)
    return {"url": KeitaroService(db).generate_tracking_link(integration, payload.base_url, payload.params)}


@router.post("/keitaro/generate-button-link")
def keitaro_generate_button_link(payload: GenerateButtonLinkIn, db: Session = Depends(get_db)):
    integration = get_service(db).get(payload.integration_id)
    return {"url": KeitaroService(db).generate_button_link(integration, payload)}


@router.post("/keitaro/exchange-code")
def keitaro_exchange_code(payload: ExchangeCodeIn, db: Session = Depends(get_db)):
    integration = get_service(db).get(payload.integration_id)
    return KeitaroService(db).exchange_code(integration, payload.code, payload.redirect_uri)


@router.post("/{integration_id}/keitaro/refresh-token")
def keitaro_refresh_token(integration_id: int, db: Session = Depends(get_db)):
    integration = get_service(db).get(integration_id)
    return KeitaroService(db).refresh_token(integration)


@router.post("/keitaro/send-data")
def keitaro_send_data(payload: SendDataIn, db: Session = Depends(get_db)):
    integration = get_service(db).get(payload.integration_id)
    return KeitaroService(db).send_data(integration, payload.data, payload.endpoint)


# ---------------------------------------------------------------------------
# Facebook
# ---------------------------------------------------------------------------

@router.post("/facebook/exchange-code")
def facebook_exchange_code(payload: ExchangeCodeIn, db: Session = Depends(get_db)):
    integration = get_service(db).get(payload.integration_id)
    return FacebookService(db).exchange_code(integration, payload.code, payload.redirect_uri)


@router.get("/{integration_id}/facebook/page-info")
def facebook_page_info(integration_id: int, db: Session = Depends(get_db)):
    integration = get_service(db).get(integration_id)
    return FacebookService(db).get_page_info(integration)


@router.post("/facebook/post")
def facebook_post(payload: FacebookPostIn, db: Session = Depends(get_db)):
    integration = get_service(db).get(payload.integration_id)
    return FacebookService(db).post_to_page(integration, payload.message, payload.options)


# ---------------------------------------------------------------------------
# single record
# ---------------------------------------------------------------------------

@router.get("/{integration_id}", response_model=IntegrationOut)
def get_integration(integration_id: int, db: Session = Depends(get_db)):
    svc = get_service(db)
    return svc.to_dict(svc.get(integration_id))


@router.patch("/{integration_id}", response_model=IntegrationOut)
def update_integration(integration_id: int, payload: IntegrationUpdate, db: Session = Depends(get_db)):
    svc = get_service(db)
    return svc.to_dict(svc.update(integration_id, payload))


@router.delete("/{integration_id}", response_model=IntegrationOut)
def remove_integration(integration_id: int, db: Session = Depends(get_db)):
    svc = get_service(db)
    return svc.remove(integration_id)


@router.post("/{integration_id}/activate", response_model=IntegrationOut)
def activate(integration_id: int, db: Session = Depends(get_db)):
    svc = get_service(db)
    return svc.to_dict(svc.activate(integration_id))


@router.post("/{integration_id}/deactivate", response_model=IntegrationOut)
def deactivate(integration_id: int, db: Session = Depends(get_db)):
    svc = get_service(db)
    return svc.to_dict(svc.deactivate(integration_id))
