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
"""Periodic execution of spawner cycles."""
import logging
import math
import time
from threading import Event

from .exceptions import SpawnerError
from .spawner import Spawner


class Scheduler:
    """Run a spawner cycle once every interval until stopped.

    Cycles never overlap. Every cycle gets its own deadline, independent
    of the interval.
    """

    logger = logging.getLogger(__name__)

    def __init__(self, spawner: Spawner, interval: float, timeout: float) -> None:
        """Initialize the scheduler.

        :param spawner: Spawner to run cycles with.
        :param interval: Seconds between the start of two cycles.
        :param timeout: Deadline in seconds for each cycle.
        """
        self.spawner = spawner
        self.interval = interval
        self.timeout = timeout
        self.__stop = Event()

    def stop(self) -> None:
        """Stop the scheduler after the current cycle."""
        self.__stop.set()

    def tick(self) -> bool:
        """Run a single spawner cycle and log its outcome.

        :return: Whether the cycle succeeded.
        """
        try:
            self.spawner.run(self.timeout)
        except SpawnerError as exception:
            self.logger.error("Running spawner failed at stage %r: %s", exception.stage, exception)
            return False
        except Exception:  # pylint:disable=broad-except
            self.logger.exception("Running spawner failed unexpectedly")
            return False
        self.logger.info("Spawner cycle finished successfully")
        return True

    def run_forever(self) -> None:
        """Run spawner cycles on a fixed interval until stopped.

        The first cycle starts one interval after the call. A cycle that
        overruns one or more intervals makes the scheduler skip the ticks
        that were missed, so cycles always start on the interval grid.
        """
        self.logger.info(
            "Running spawner every %.1fs with a %.1fs deadline", self.interval, self.timeout
        )
        next_start = time.monotonic() + self.interval
        while not self.__stop.wait(max(0.0, next_start - time.monotonic())):
            self.tick()
            next_start += self.interval
            late = time.monotonic() - next_start
            if late > 0 and self.interval > 0:
                missed = math.ceil(late / self.interval)
                self.logger.warning("Spawner cycle overran, skipping %d tick(s)", missed)
                next_start += missed * self.interval
        self.logger.info("Spawner scheduler stopped")
