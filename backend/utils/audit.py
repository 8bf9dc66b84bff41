import logging

from fastapi import Request
from sqlalchemy.orm import Session
from models.log import Log

logger = logging.getLogger(__name__)

def client_ip(request: Request):
    return request.client.host if request and request.client else None

def write_log(db: Session, *, user_id, action, resource, status="SUCCESS", ip=None, meta=None):
    entry = Log(user_id=user_id, action=action, resource=resource, status=status, ip=ip, meta=meta or {})
    db.add(entry)
    db.commit()
    logger.info("%s %s user=%s status=%s meta=%s", action, resource, user_id, status, meta or {})
