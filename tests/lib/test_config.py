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
"""Tests for the patient spawner configuration."""
import logging
import os
import unittest
from tempfile import NamedTemporaryFile

from patient_spawner.exceptions import ConfigurationError
from patient_spawner.lib.config import Config


class TestConfig(unittest.TestCase):
    """Test loading of the patient spawner configuration."""

    logger = logging.getLogger(__name__)

    def test_load_from_environment(self):
        """Test that configuration is loaded from prefixed environment variables.

        Approval criteria:
            - Prefixed variables shall be loaded without prefix.
            - Digit values shall be converted to numbers.
            - Other variables shall be ignored.

        Test steps:
            1. Load a configuration from an environment.
            2. Verify the loaded values.
        """
        environment = {
            "PATIENT_SPAWNER_IMAGE": "kubenurse:latest",
            "PATIENT_SPAWNER_NAMESPACE": "kube-system",
            "PATIENT_SPAWNER_SERVICE_URL": "http://kubenurse:8080",
            "PATIENT_SPAWNER_INGRESS_URL": "https://kubenurse.example.com",
            "PATIENT_SPAWNER_INTERVAL": "30",
            "PATIENT_SPAWNER_TIMEOUT": "45",
            "PATIENT_SPAWNER_POD_NAME": "kubenurse-abc",
            "OTHER": "value",
        }
        self.logger.info("STEP: Load a configuration from an environment.")
        config = Config(environment)

        self.logger.info("STEP: Verify the loaded values.")
        self.assertEqual(config.patient_image, "kubenurse:latest")
        self.assertEqual(config.namespace, "kube-system")
        self.assertEqual(config.service_url, "http://kubenurse:8080")
        self.assertEqual(config.ingress_url, "https://kubenurse.example.com")
        self.assertEqual(config.get("INTERVAL"), 30)
        self.assertEqual(config.interval, 30.0)
        self.assertEqual(config.timeout, 45.0)
        self.assertEqual(config.pod_name, "kubenurse-abc")
        self.assertIsNone(config.get("OTHER"))

    def test_defaults(self):
        """Test the default configuration values.

        Approval criteria:
            - Interval, timeouts and log level shall have defaults.
            - Pod name shall default to HOSTNAME.

        Test steps:
            1. Load a configuration with only HOSTNAME set.
            2. Verify the default values.
        """
        self.logger.info("STEP: Load a configuration with only HOSTNAME set.")
        config = Config({"HOSTNAME": "kubenurse-xyz"})

        self.logger.info("STEP: Verify the default values.")
        self.assertEqual(config.interval, 60.0)
        self.assertEqual(config.timeout, 120.0)
        self.assertEqual(config.cleanup_timeout, 10.0)
        self.assertEqual(config.log_level, "INFO")
        self.assertEqual(config.pod_name, "kubenurse-xyz")
        self.assertIsNone(config.namespace)
        self.assertIsNone(config.pod_template)

    def test_validate(self):
        """Test that a configuration without image is invalid.

        Approval criteria:
            - Validation shall fail if the patient image is not set.

        Test steps:
            1. Validate a configuration without image.
            2. Validate a configuration with image.
        """
        self.logger.info("STEP: Validate a configuration without image.")
        with self.assertRaises(ConfigurationError):
            Config({}).validate()
        self.logger.info("STEP: Validate a configuration with image.")
        Config({"PATIENT_SPAWNER_IMAGE": "kubenurse:latest"}).validate()

    def test_pod_template(self):
        """Test that the pod template is read from file.

        Approval criteria:
            - The pod template shall be read from the configured path.
            - A missing file shall raise a configuration error.

        Test steps:
            1. Write a pod template to a file.
            2. Verify that the configuration returns the file content.
            3. Verify that a missing file raises a configuration error.
        """
        self.logger.info("STEP: Write a pod template to a file.")
        with NamedTemporaryFile(mode="wb", suffix=".yaml", delete=False) as template:
            template.write(b"apiVersion: v1\nkind: Pod\n")
        try:
            self.logger.info("STEP: Verify that the configuration returns the file content.")
            config = Config({"PATIENT_SPAWNER_POD_TEMPLATE": template.name})
            self.assertEqual(config.pod_template, b"apiVersion: v1\nkind: Pod\n")
        finally:
            os.remove(template.name)

        self.logger.info("STEP: Verify that a missing file raises a configuration error.")
        config = Config({"PATIENT_SPAWNER_POD_TEMPLATE": template.name})
        with self.assertRaises(ConfigurationError):
            config.pod_template  # pylint:disable=pointless-statement
