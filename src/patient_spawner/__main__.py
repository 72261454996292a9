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
"""Patient spawner entry point."""
import logging
import signal
import sys

from kubernetes.config import ConfigException

from .exceptions import ConfigurationError, DecodeError
from .lib.config import Config
from .lib.kubernetes import Kubernetes, NoNamespace
from .lib.template import decode_pod_template
from .scheduler import Scheduler
from .spawner import Spawner

FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def main() -> int:
    """Load configuration and run the spawner until terminated."""
    config = Config()
    logging.basicConfig(level=config.log_level, format=FORMAT)
    logger = logging.getLogger("PatientSpawner")
    try:
        config.validate()
        # Fail early on a broken template instead of on every cycle.
        decode_pod_template(config.pod_template)
        kubernetes = Kubernetes(namespace=config.namespace)
        logger.info("Spawning patient pods in namespace %r", kubernetes.namespace)
        spawner = Spawner(config, kubernetes)
    except (ConfigException, ConfigurationError, DecodeError, NoNamespace) as exception:
        logger.error("Could not start the patient spawner: %s", exception)
        return 1

    scheduler = Scheduler(spawner, config.interval, config.timeout)
    signal.signal(signal.SIGTERM, lambda *_: scheduler.stop())
    try:
        scheduler.run_forever()
    except KeyboardInterrupt:
        scheduler.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
