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
"""Kubernetes client for the patient spawner."""
import os
import logging
from pathlib import Path
from typing import Iterator, Optional
from kubernetes import config
from kubernetes.client import api_client
from kubernetes.dynamic import DynamicClient
from kubernetes.dynamic.exceptions import NotFoundError
from kubernetes.dynamic.resource import Resource as DynamicResource, ResourceInstance
from kubernetes.watch import Watch

NAMESPACE_FILE = Path("/var/run/secrets/kubernetes.io/serviceaccount/namespace")


class NoNamespace(Exception):
    """NoNamespace exception is raised when the current namespace could not be determined."""


class Resource:
    """Resource is the base resource client for namespaced Kubernetes resources."""

    client: DynamicResource
    namespace: str = "default"
    logger = logging.getLogger(__name__)

    def __full_resource_name(self, name: str) -> str:
        """Full resource name will return the version, namespace and kind."""
        return f"{self.client.api_version}/{self.client.kind} {self.namespace}/{name}"

    def get(self, name: str, timeout: Optional[float] = None) -> Optional[ResourceInstance]:
        """Get a resource from Kubernetes by name.

        There is no cache, the resource is always fetched from Kubernetes.

        :param name: Name of the resource to get.
        :param timeout: Request timeout in seconds.
        :return: The resource or None if it does not exist.
        """
        try:
            return self.client.get(name=name, namespace=self.namespace, _request_timeout=timeout)
        except NotFoundError:
            return None

    def create(self, body: dict, timeout: Optional[float] = None) -> ResourceInstance:
        """Create a resource in Kubernetes.

        :param body: Resource definition to create.
        :param timeout: Request timeout in seconds.
        :return: The resource as stored by Kubernetes.
        """
        return self.client.create(body=body, namespace=self.namespace, _request_timeout=timeout)

    def delete(self, name: str, timeout: Optional[float] = None) -> bool:
        """Delete a resource from Kubernetes by name.

        A resource that does not exist is treated as already deleted.

        :param name: Name of the resource to delete.
        :param timeout: Request timeout in seconds.
        :return: True if the resource was deleted, False if it did not exist.
        """
        try:
            self.client.delete(name=name, namespace=self.namespace, _request_timeout=timeout)
        except NotFoundError:
            self.logger.debug("%s already deleted", self.__full_resource_name(name))
            return False
        return True

    def watch(self, watcher: Watch, timeout: Optional[int] = None) -> Iterator[dict]:
        """Watch all resources of this kind in the namespace.

        The stream starts with an ADDED event for every resource that already
        exists and then yields every change until the server closes it, the
        timeout is reached or the watcher is stopped.

        :param watcher: Watch object that controls the stream.
        :param timeout: Server side timeout of the stream in seconds.
        """
        return self.client.watch(namespace=self.namespace, watcher=watcher, timeout=timeout)


class Kubernetes:
    """Kubernetes is a client for fetching and managing pods in the current namespace."""

    __pods = None
    __namespace = None
    logger = logging.getLogger(__name__)

    def __init__(self, namespace: Optional[str] = None, client: Optional[DynamicClient] = None):
        """Initialize a dynamic client.

        :param namespace: Namespace to work in. Detected from the environment if not set.
        :param client: Dynamic client to use. Created from the kube config if not set.
        """
        if client is None:
            config.load_config()
            client = DynamicClient(api_client.ApiClient())
        self.__client = client
        self.__namespace = namespace

    @property
    def namespace(self) -> str:
        """Namespace returns the current namespace of the machine this code is running on."""
        if self.__namespace is None:
            if not NAMESPACE_FILE.exists():
                self.logger.warning(
                    "Not running in Kubernetes? Namespace file not found: %s", NAMESPACE_FILE
                )
                namespace = os.getenv("PATIENT_SPAWNER_NAMESPACE")
                if namespace:
                    self.logger.warning(
                        "Defaulting to environment variable 'PATIENT_SPAWNER_NAMESPACE': %s",
                        namespace,
                    )
                else:
                    self.logger.warning("PATIENT_SPAWNER_NAMESPACE environment variable not set!")
                    raise NoNamespace("Failed to determine Kubernetes namespace!")
                self.__namespace = namespace
            else:
                self.__namespace = NAMESPACE_FILE.read_text().strip()
        return self.__namespace

    @property
    def pods(self) -> DynamicResource:
        """Pods returns a client for Pod resources."""
        if self.__pods is None:
            self.__pods = self.__client.resources.get(api_version="v1", kind="Pod")
        return self.__pods
