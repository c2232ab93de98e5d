"""
Settings and deployment definition loading.
"""

import json
import os
from pathlib import Path
from typing import List, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from .errors import DefinitionError
from .models import StreamSpec


class TagKeys(BaseModel):
    """Keys under which the ownership tags are stored."""
    sbu: str = "sbu"
    org: str = "org"
    app: str = "application"
    cluster: str = "cluster"


class BrokerSettings(BaseModel):
    region: str = "us-west-2"
    poll_interval: float = Field(20.0, gt=0)
    wait_timeout: float = Field(600.0, gt=0)
    kms_key_id: str = "alias/aws/kinesis"
    tag_keys: TagKeys = TagKeys()


class ClusterMetadata(BaseModel):
    cluster_id: str
    sbu: str
    org: str


class StreamDefinition(BaseModel):
    name: str = Field(..., min_length=1)
    shard_count: int = Field(..., ge=1)


class DeploymentDefinition(BaseModel):
    """Desired state of one deployment as read from its definition file."""
    app_name: str = Field(..., min_length=1)
    cluster: ClusterMetadata
    streams: Optional[List[StreamDefinition]] = None

    def stream_specs(self) -> List[StreamSpec]:
        return [StreamSpec(name=s.name, shard_count=s.shard_count) for s in self.streams or []]


def _env(name: str, default: str) -> str:
    return os.environ.get(f"STREAMWRIGHT_{name}", default)


def load_settings() -> BrokerSettings:
    """
    Build settings from STREAMWRIGHT_* environment variables.

    Returns:
        BrokerSettings with defaults for anything unset

    Raises:
        ValueError: If a numeric variable is not a positive number
    """
    defaults = TagKeys()
    try:
        return BrokerSettings(
            region=_env("REGION", os.environ.get("AWS_REGION", "us-west-2")),
            poll_interval=float(_env("POLL_INTERVAL", "20")),
            wait_timeout=float(_env("WAIT_TIMEOUT", "600")),
            kms_key_id=_env("KMS_KEY_ID", "alias/aws/kinesis"),
            tag_keys=TagKeys(
                sbu=_env("SBU_TAG_KEY", defaults.sbu),
                org=_env("ORG_TAG_KEY", defaults.org),
                app=_env("APP_TAG_KEY", defaults.app),
                cluster=_env("CLUSTER_TAG_KEY", defaults.cluster),
            ),
        )
    except ValidationError as e:
        raise ValueError(f"Invalid streamwright settings: {e}") from e


def load_definition(path: Union[str, Path]) -> DeploymentDefinition:
    """
    Read and validate a deployment definition JSON file.

    Raises:
        DefinitionError: If the file is missing, not JSON, or invalid
    """
    definition_file = Path(path)

    if not definition_file.exists():
        raise DefinitionError(f"Definition file {definition_file} not found")

    try:
        with open(definition_file, "r") as f:
            data = json.load(f)
    except (json.JSONDecodeError, IOError) as e:
        raise DefinitionError(f"Failed to read definition {definition_file}: {e}") from e

    try:
        return DeploymentDefinition(**data)
    except (ValidationError, TypeError) as e:
        raise DefinitionError(f"Invalid definition {definition_file}: {e}") from e
