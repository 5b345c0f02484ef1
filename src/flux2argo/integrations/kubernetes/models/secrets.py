"""Models for Flux source credential secrets."""

from __future__ import annotations

import base64
import binascii
from typing import Any, ClassVar

from pydantic import ConfigDict, Field

from flux2argo.integrations.kubernetes.models.base import (
    K8sEntityBase,
    _metadata_fields,
)

IDENTITY_KEY = "identity"
USERNAME_KEY = "username"
PASSWORD_KEY = "password"


def _decode(value: str) -> str:
    """Decode a base64 Secret ``data`` value."""
    return base64.b64decode(value, validate=True).decode("utf-8")


class SourceCredentials(K8sEntityBase):
    """Decoded credentials from a Flux source ``secretRef``.

    Flux stores an SSH private key under ``identity`` and HTTPS basic auth
    under ``username``/``password``.
    """

    # PEM keys must keep their trailing newline
    model_config = ConfigDict(str_strip_whitespace=False)

    _entity_name: ClassVar[str] = "source_credentials"

    ssh_private_key: str | None = Field(default=None, repr=False)
    username: str | None = Field(default=None)
    password: str | None = Field(default=None, repr=False)

    @classmethod
    def from_k8s_object(cls, obj: dict[str, Any]) -> SourceCredentials:
        """Create from a Secret dict as returned by the API.

        Raises:
            ValueError: If a known key holds invalid base64 or non UTF-8 data.
        """
        data: dict[str, str] = obj.get("data") or {}
        string_data: dict[str, str] = obj.get("stringData") or {}

        decoded: dict[str, str] = {}
        for key in (IDENTITY_KEY, USERNAME_KEY, PASSWORD_KEY):
            if key in string_data:
                decoded[key] = string_data[key]
            elif key in data:
                try:
                    decoded[key] = _decode(data[key])
                except (binascii.Error, UnicodeDecodeError) as e:
                    raise ValueError(f"secret key '{key}' is not valid base64 text") from e

        fields = _metadata_fields(obj)
        # Keep secret material out of the raw copy
        fields["raw"] = {"metadata": obj.get("metadata", {})}
        return cls(
            **fields,
            ssh_private_key=decoded.get(IDENTITY_KEY),
            username=decoded.get(USERNAME_KEY),
            password=decoded.get(PASSWORD_KEY),
        )

    @property
    def has_credentials(self) -> bool:
        """Whether the secret carries any usable credential."""
        return bool(self.ssh_private_key or (self.username and self.password))
