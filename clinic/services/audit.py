from typing import Optional, Any, Dict
from django.contrib.auth import get_user_model
from clinic.models import AuditEvent, TransactionLog

User = get_user_model()


def client_ip(request) -> Optional[str]:
    if request is None:
        return None
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR')


def account(user) -> Optional[User]:
    """The stored account behind ``user``, or None for anonymous and offline users."""
    return user if isinstance(user, User) and getattr(user, 'pk', None) else None


def log_action(*, user: Optional[User], action: str, object_type: Optional[str]=None, object_id: Optional[Any]=None, detail: Optional[Dict[str, Any]]=None, request=None) -> AuditEvent:
    return AuditEvent.objects.create(
        user=account(user),
        action=action,
        object_type=object_type,
        object_id=str(object_id) if object_id is not None else None,
        detail=detail or {},
        ip=client_ip(request),
    )


def log_transaction(*, trans_id: Any, status: str, step: Optional[str]=None, response_code: Optional[str]=None, description: Optional[str]=None, data: Optional[Dict[str, Any]]=None) -> TransactionLog:
    return TransactionLog.objects.create(
        trans_id=str(trans_id),
        status=status,
        step=step,
        response_code=response_code,
        description=description,
        data=data,
    )
