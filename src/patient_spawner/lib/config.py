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
"""Patient spawner configuration module."""
import logging
import os
import socket
from pathlib import Path
from typing import Any, Mapping, Optional

from ..exceptions import ConfigurationError

PREFIX = "PATIENT_SPAWNER_"


class Config:
    """Patient spawner configuration.

    Every environment variable starting with ``PATIENT_SPAWNER_`` is loaded,
    with the prefix removed, i.e. ``PATIENT_SPAWNER_IMAGE`` is loaded as ``IMAGE``.
    """

    logger = logging.getLogger("Config")

    def __init__(self, environ: Optional[Mapping[str, str]] = None) -> None:
        """Initialize and automatically load the config.

        :param environ: Environment to load from. Defaults to os.environ.
        """
        self.__config: dict[str, Any] = {}
        self.__template: Optional[bytes] = None
        self.load_config(os.environ if environ is None else environ)

    def load_config(self, environ: Mapping[str, str]) -> None:
        """Load config from environment variables."""
        for key, value in environ.items():
            if key.startswith(PREFIX):
                if isinstance(value, bytes):
                    value = value.decode("utf-8")
                if value.isdigit():
                    value = int(value)
                self.__config[key.replace(PREFIX, "", 1)] = value
        if "POD_NAME" not in self.__config and environ.get("HOSTNAME"):
            self.__config["POD_NAME"] = environ["HOSTNAME"]

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value."""
        return self.__config.get(key, default)

    def validate(self) -> None:
        """Verify that all required configuration is set."""
        if not self.patient_image:
            raise ConfigurationError(f"{PREFIX}IMAGE must be set")

    @property
    def namespace(self) -> Optional[str]:
        """Namespace of the spawner and its patient pods, None means auto detect."""
        return self.get("NAMESPACE")

    @property
    def pod_name(self) -> str:
        """Name of the pod that the spawner is running in."""
        return str(self.get("POD_NAME", socket.gethostname()))

    @property
    def patient_image(self) -> str:
        """Container image to run in the patient pods."""
        return self.get("IMAGE", "")

    @property
    def service_url(self) -> str:
        """URL of the service that patient pods shall check."""
        return self.get("SERVICE_URL", "")

    @property
    def ingress_url(self) -> str:
        """URL of the ingress that patient pods shall check."""
        return self.get("INGRESS_URL", "")

    @property
    def interval(self) -> float:
        """Seconds between two spawner cycles."""
        return float(self.get("INTERVAL", 60))

    @property
    def timeout(self) -> float:
        """Deadline in seconds for a single spawner cycle."""
        return float(self.get("TIMEOUT", 120))

    @property
    def cleanup_timeout(self) -> float:
        """Timeout in seconds for the best effort cleanup of a patient pod."""
        return float(self.get("CLEANUP_TIMEOUT", 10))

    @property
    def log_level(self) -> str:
        """Log level for the spawner process."""
        return str(self.get("LOG_LEVEL", "INFO")).upper()

    @property
    def pod_template(self) -> Optional[bytes]:
        """Pod template read from the file in POD_TEMPLATE, if any.

        The file is read once and kept for the lifetime of the configuration.
        """
        path = self.get("POD_TEMPLATE")
        if path is None:
            return None
        if self.__template is None:
            self.logger.info("Loading pod template from %s", path)
            try:
                self.__template = Path(path).read_bytes()
            except OSError as exception:
                raise ConfigurationError(f"Could not read pod template {path!r}") from exception
        return self.__template
