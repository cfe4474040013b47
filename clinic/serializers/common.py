import bleach
from rest_framework import serializers
from rest_framework.fields import empty


def clean_text(v):
    """Strip surrounding whitespace and any markup from user supplied text."""
    if v is None:
        return None
    return bleach.clean(str(v).strip(), tags=[], strip=True)


class CleanCharField(serializers.CharField):
    """CharField that sanitises its value; blank optional input becomes ``None``."""

    def __init__(self, **kwargs):
        kwargs.setdefault('required', False)
        if not kwargs['required']:
            kwargs.setdefault('allow_blank', True)
            kwargs.setdefault('allow_null', True)
        super().__init__(**kwargs)

    def run_validation(self, data=empty):
        v = super().run_validation(data)
        if v is None:
            return None
        v = clean_text(v)
        if not v:
            if self.required:
                self.fail('blank')
            return None
        return v


def split_csv(value):
    return [s.strip() for s in (value or '').split(',') if s.strip()]
