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
"""Patient spawner.

A spawner cycle creates a patient pod next to the pod that the spawner runs
in, waits for the patient to get an IP and deletes it again::

    IDLE -> TEMPLATE_DECODED -> SELF_LOCATED -> CONFIGURED -> CREATED
         -> ADDRESS_ACQUIRED -> DELETED -> IDLE

A patient pod that has been created is always deleted before the cycle
returns, regardless of which step failed.
"""
import logging
import time
from enum import Enum
from typing import Optional

from kubernetes.client.exceptions import ApiException
from kubernetes.dynamic.exceptions import DynamicApiError
from opentelemetry import trace
from pydantic import ValidationError
from urllib3.exceptions import HTTPError

from .exceptions import (
    ConfigurationError,
    CreateError,
    DecodeError,
    DeleteError,
    SelfLookupError,
    SpawnerError,
)
from .lib.config import Config
from .lib.configure import configure_pod
from .lib.kubernetes import Kubernetes, Pod
from .lib.kubernetes.schemas import Pod as PodSchema
from .lib.template import decode_pod_template
from .lib.watcher import ConditionWatcher, has_ip

TRACER = trace.get_tracer(__name__)
API_ERRORS = (ApiException, DynamicApiError, HTTPError)


class CycleState(Enum):
    """States of a single spawner cycle."""

    IDLE = "idle"
    TEMPLATE_DECODED = "template-decoded"
    SELF_LOCATED = "self-located"
    CONFIGURED = "configured"
    CREATED = "created"
    ADDRESS_ACQUIRED = "address-acquired"
    DELETED = "deleted"


class Spawner:
    """Spawner spawns patient pods in order to check the network paths to them."""

    logger = logging.getLogger(__name__)

    def __init__(self, config: Config, kubernetes: Kubernetes) -> None:
        """Set up the pod client.

        :param config: Spawner configuration.
        :param kubernetes: Kubernetes client to create patient pods with.
        """
        self.config = config
        self.pods = Pod(kubernetes)
        self.watcher = ConditionWatcher(self.pods)
        self.state = CycleState.IDLE

    def __transition(self, state: CycleState) -> None:
        """Move the current cycle to a new state."""
        self.logger.debug("Spawner cycle %s -> %s", self.state.value, state.value)
        self.state = state

    def run(self, timeout: float) -> None:
        """Run a single spawner cycle.

        :param timeout: Deadline in seconds for the whole cycle.
        """
        deadline = time.monotonic() + timeout
        with TRACER.start_as_current_span("spawner-cycle") as span:
            try:
                self._run(deadline)
            except SpawnerError as exception:
                span.set_attribute("error.type", exception.__class__.__name__)
                span.set_attribute("spawner.stage", exception.stage)
                span.record_exception(exception)
                span.set_status(trace.Status(trace.StatusCode.ERROR))
                raise
            finally:
                self.state = CycleState.IDLE

    def _run(self, deadline: float) -> None:
        """Run the spawner cycle steps until the deadline."""
        try:
            template = self.config.pod_template
        except ConfigurationError as exception:
            raise DecodeError(f"reading pod template: {exception}") from exception
        pod = decode_pod_template(template)
        self.__transition(CycleState.TEMPLATE_DECODED)

        parent = self.locate_self(self.__remaining(deadline))
        self.__transition(CycleState.SELF_LOCATED)

        configure_pod(pod, parent, self.config)
        self.__transition(CycleState.CONFIGURED)
        trace.get_current_span().set_attribute("spawner.patient", pod.metadata.name or "")

        name = self.create(pod, self.__remaining(deadline))
        self.__transition(CycleState.CREATED)
        try:
            patient = self.watcher.wait(name, has_ip, self.__remaining(deadline))
            self.logger.info("Patient pod %r got IP %s", name, patient.status.podIP)
            self.__transition(CycleState.ADDRESS_ACQUIRED)

            self.delete(name, self.__remaining(deadline))
            self.__transition(CycleState.DELETED)
        finally:
            self.cleanup(name)

    @staticmethod
    def __remaining(deadline: float) -> float:
        """Seconds left until the deadline, never negative."""
        return max(0.0, deadline - time.monotonic())

    def locate_self(self, timeout: Optional[float] = None) -> PodSchema:
        """Fetch the pod that the spawner is running in.

        :param timeout: Request timeout in seconds.
        :return: The spawner pod.
        """
        name = self.config.pod_name
        try:
            resource = self.pods.get(name, timeout=timeout)
        except API_ERRORS as exception:
            raise SelfLookupError(
                f"fetching data about myself ({name!r}): {exception}"
            ) from exception
        if resource is None:
            raise SelfLookupError(f"fetching data about myself: pod {name!r} not found")
        try:
            return PodSchema.model_validate(resource.to_dict())
        except ValidationError as exception:
            raise SelfLookupError(f"parsing data about myself: {exception}") from exception

    def create(self, pod: PodSchema, timeout: Optional[float] = None) -> str:
        """Create the patient pod.

        :param pod: Configured patient pod.
        :param timeout: Request timeout in seconds.
        :return: Name of the created pod.
        """
        self.logger.info("Creating patient pod %r", pod.metadata.name)
        try:
            created = self.pods.create(pod.to_body(), timeout=timeout)
        except API_ERRORS as exception:
            raise CreateError(f"creating patient pod: {exception}") from exception
        return created.to_dict().get("metadata", {}).get("name", pod.metadata.name)

    def delete(self, name: str, timeout: Optional[float] = None) -> None:
        """Delete the patient pod.

        :param name: Name of the patient pod.
        :param timeout: Request timeout in seconds.
        """
        self.logger.info("Deleting patient pod %r", name)
        try:
            self.pods.delete(name, timeout=timeout)
        except API_ERRORS as exception:
            raise DeleteError(f"deleting patient pod: {exception}") from exception

    def cleanup(self, name: str) -> None:
        """Delete the patient pod if it still exists, logging any failure.

        :param name: Name of the patient pod.
        """
        try:
            if not self.pods.delete(name, timeout=self.config.cleanup_timeout):
                return
            if self.state == CycleState.DELETED:
                self.logger.debug("Patient pod %r still terminating during cleanup", name)
            else:
                self.logger.info("Cleaned up patient pod %r", name)
        except Exception as exception:  # pylint:disable=broad-except
            self.logger.error("Deleting patient pod %r during cleanup: %r", name, exception)
