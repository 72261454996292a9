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
"""Tests for the Kubernetes client."""
import logging
import os
import unittest
from pathlib import Path
from unittest import mock

from patient_spawner.lib.kubernetes import Kubernetes, NoNamespace, Pod
from tests.library.fake_kubernetes import FakeKubernetes, FakePodResource


class FakeResources:
    """Fake resource discoverer of the dynamic client."""

    def __init__(self, resource):
        """Init."""
        self.resource = resource
        self.requested = []

    def get(self, api_version, kind):
        """Return the fake resource."""
        self.requested.append((api_version, kind))
        return self.resource


class FakeDynamicClient:  # pylint:disable=too-few-public-methods
    """Fake dynamic client."""

    def __init__(self, resource):
        """Init."""
        self.resources = FakeResources(resource)


class TestKubernetes(unittest.TestCase):
    """Test the Kubernetes client."""

    logger = logging.getLogger(__name__)

    def test_pods(self):
        """Test that the client returns the v1 Pod resource.

        Approval criteria:
            - The pod resource shall be looked up once.

        Test steps:
            1. Get the pod resource twice.
            2. Verify that the v1 Pod resource was looked up once.
        """
        resource = FakePodResource()
        client = FakeDynamicClient(resource)
        kubernetes = Kubernetes(namespace="test-ns", client=client)
        self.logger.info("STEP: Get the pod resource twice.")
        self.assertIs(kubernetes.pods, resource)
        self.assertIs(kubernetes.pods, resource)
        self.logger.info("STEP: Verify that the v1 Pod resource was looked up once.")
        self.assertListEqual(client.resources.requested, [("v1", "Pod")])

    def test_namespace_from_environment(self):
        """Test that the namespace falls back to the environment.

        Approval criteria:
            - Outside of Kubernetes the namespace shall be read from the environment.
            - Without environment variable NoNamespace shall be raised.

        Test steps:
            1. Get namespace with the environment variable set.
            2. Get namespace without the environment variable set.
        """
        missing = Path("/this/file/does/not/exist")
        with mock.patch("patient_spawner.lib.kubernetes.client.NAMESPACE_FILE", missing):
            self.logger.info("STEP: Get namespace with the environment variable set.")
            with mock.patch.dict(os.environ, {"PATIENT_SPAWNER_NAMESPACE": "from-env"}):
                kubernetes = Kubernetes(client=FakeDynamicClient(None))
                self.assertEqual(kubernetes.namespace, "from-env")

            self.logger.info("STEP: Get namespace without the environment variable set.")
            with mock.patch.dict(os.environ, {}, clear=True):
                kubernetes = Kubernetes(client=FakeDynamicClient(None))
                with self.assertRaises(NoNamespace):
                    kubernetes.namespace  # pylint:disable=pointless-statement

    def test_namespace_explicit(self):
        """Test that an explicit namespace is used as is.

        Approval criteria:
            - An explicit namespace shall be used without detection.

        Test steps:
            1. Create a client with a namespace and verify it.
        """
        self.logger.info("STEP: Create a client with a namespace and verify it.")
        kubernetes = Kubernetes(namespace="explicit", client=FakeDynamicClient(None))
        self.assertEqual(kubernetes.namespace, "explicit")


class TestPodResource(unittest.TestCase):
    """Test the pod resource client."""

    logger = logging.getLogger(__name__)

    def setUp(self):
        """Create a pod client with a fake backend."""
        self.kubernetes = FakeKubernetes()
        self.fake = self.kubernetes.pods
        self.pods = Pod(self.kubernetes)

    def test_get_missing(self):
        """Test that getting a missing pod returns None.

        Approval criteria:
            - A missing pod shall be returned as None.

        Test steps:
            1. Get a missing pod and verify that None is returned.
        """
        self.logger.info("STEP: Get a missing pod and verify that None is returned.")
        self.assertIsNone(self.pods.get("missing"))

    def test_create_and_delete(self):
        """Test that pods can be created and deleted, and deleted again.

        Approval criteria:
            - Deleting an existing pod shall return True.
            - Deleting a missing pod shall return False without raising.

        Test steps:
            1. Create a pod.
            2. Delete the pod.
            3. Delete the pod again.
        """
        self.logger.info("STEP: Create a pod.")
        self.pods.create({"metadata": {"name": "patient"}})
        self.assertIsNotNone(self.pods.get("patient"))

        self.logger.info("STEP: Delete the pod.")
        self.assertTrue(self.pods.delete("patient"))

        self.logger.info("STEP: Delete the pod again.")
        self.assertFalse(self.pods.delete("patient"))
        self.assertIsNone(self.pods.get("patient"))
