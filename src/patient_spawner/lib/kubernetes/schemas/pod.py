# Copyright Axis Communications AB.
#
# For a full list of individual contributors, please see the commit history.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Pod schemas.

Only the fields that the spawner reads or writes are modeled. All other fields
are kept as extras so that a template can carry any pod setting into the
creation request.
"""
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from .common import Metadata


class EnvVar(BaseModel):
    """EnvVar is an environment variable set in a container."""

    model_config = ConfigDict(extra="allow")

    name: str
    value: Optional[str] = None


class Container(BaseModel):
    """Container describes a single container in a pod."""

    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    image: Optional[str] = None
    imagePullPolicy: Optional[str] = None
    command: Optional[list[str]] = None
    args: Optional[list[str]] = None
    env: list[EnvVar] = []

    @field_validator("env", mode="before")
    @classmethod
    def empty_if_null(cls, value: Any) -> Any:
        """YAML gives None for keys without a value, treat them as empty."""
        return [] if value is None else value


class PersistentVolumeClaimVolumeSource(BaseModel):
    """Reference to a persistent volume claim in the same namespace."""

    claimName: str
    readOnly: Optional[bool] = None


class Volume(BaseModel):
    """Volume that can be mounted by containers in a pod."""

    model_config = ConfigDict(extra="allow")

    name: str
    persistentVolumeClaim: Optional[PersistentVolumeClaimVolumeSource] = None


class PodSpec(BaseModel):
    """PodSpec is the specification of a Pod."""

    model_config = ConfigDict(extra="allow")

    containers: list[Container] = []
    volumes: list[Volume] = []

    @field_validator("containers", "volumes", mode="before")
    @classmethod
    def empty_if_null(cls, value: Any) -> Any:
        """YAML gives None for keys without a value, treat them as empty."""
        return [] if value is None else value


class PodStatus(BaseModel):
    """PodStatus is the most recently observed status of a Pod."""

    model_config = ConfigDict(extra="allow")

    phase: Optional[str] = None
    podIP: Optional[str] = None


class Pod(BaseModel):
    """Pod describes a Kubernetes Pod resource."""

    model_config = ConfigDict(extra="allow")

    apiVersion: str = "v1"
    kind: str = "Pod"
    metadata: Metadata = Field(default_factory=Metadata)
    spec: PodSpec = Field(default_factory=PodSpec)
    status: Optional[PodStatus] = None

    @field_validator("metadata", "spec", mode="before")
    @classmethod
    def empty_if_null(cls, value: Any) -> Any:
        """YAML gives None for keys without a value, treat them as empty."""
        return {} if value is None else value

    def to_body(self) -> dict:
        """Serialize the pod into a request body for the Kubernetes API."""
        return self.model_dump(exclude_none=True, exclude={"status"})
