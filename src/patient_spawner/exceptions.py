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
"""Patient spawner exceptions.

Every exception raised out of a spawner cycle is a :class:`SpawnerError` and
names the stage of the cycle that failed.
"""
from typing import Optional


class SpawnerError(Exception):
    """A spawner cycle failed."""

    stage = "unknown"


class DecodeError(SpawnerError):
    """Pod template could not be decoded."""

    stage = "decode"


class KindMismatchError(DecodeError):
    """Pod template is not of kind Pod."""

    def __init__(self, kind: Optional[str]):
        """Store the kind that was found in the template."""
        super().__init__(f"pod template is not of type Pod, got: {kind!r}")
        self.kind = kind


class SelfLookupError(SpawnerError):
    """The spawner could not fetch its own pod."""

    stage = "locate-self"


class CreateError(SpawnerError):
    """The patient pod could not be created."""

    stage = "create"


class WaitError(SpawnerError):
    """Waiting on the patient pod failed."""

    stage = "wait"


class WaitTimeoutError(WaitError):
    """The condition was not met before the deadline."""


class WatchError(WaitError):
    """The watch stream failed or ended unexpectedly."""


class DeleteError(SpawnerError):
    """The patient pod could not be deleted."""

    stage = "delete"


class ConfigurationError(Exception):
    """Spawner configuration is missing or invalid."""
