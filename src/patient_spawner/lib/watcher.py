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
"""Event driven waiting on pod conditions."""
import logging
import math
import time
from concurrent.futures import Future, TimeoutError as FutureTimeoutError
from contextlib import closing
from threading import Event, Thread
from typing import Callable, Optional

from kubernetes.watch import Watch

from ..exceptions import WaitTimeoutError, WatchError
from .kubernetes import Pod
from .kubernetes.schemas import Pod as PodSchema

Predicate = Callable[[PodSchema], bool]
WATCHED_EVENTS = ("ADDED", "MODIFIED", "DELETED")
STOP_TIMEOUT = 1.0


def has_ip(pod: PodSchema) -> bool:
    """Test whether a pod has been assigned an IP address."""
    return pod.status is not None and bool(pod.status.podIP)


class ConditionWatcher:
    """Wait for a pod to meet a condition by watching the pod events in a namespace."""

    logger = logging.getLogger(__name__)

    def __init__(self, pods: Pod) -> None:
        """Initialize with a pod client.

        :param pods: Pod client for the namespace to watch.
        """
        self.pods = pods

    def wait(self, name: str, predicate: Predicate, timeout: float) -> PodSchema:
        """Wait until the pod with name meets the predicate.

        The watch stream is consumed in a separate thread and the first
        matching event resolves the wait. The stream is stopped when this
        method returns, no matter how it returns.

        :param name: Name of the pod to wait for.
        :param predicate: Condition that the pod shall meet.
        :param timeout: Maximum number of seconds to wait.
        :return: The pod as it was when it met the condition.
        """
        deadline = time.monotonic() + timeout
        result: Future = Future()
        cancelled = Event()
        watcher = Watch()
        thread = Thread(
            target=self.__watch,
            args=(name, predicate, deadline, watcher, cancelled, result),
            name=f"watch-{name}",
            daemon=True,
        )
        self.logger.info("Waiting at most %.1fs for pod %r", timeout, name)
        thread.start()
        try:
            return result.result(timeout=max(0.0, timeout))
        except FutureTimeoutError as exception:
            raise WaitTimeoutError(
                f"pod {name!r} did not meet condition within {timeout:.1f}s"
            ) from exception
        finally:
            cancelled.set()
            watcher.stop()
            thread.join(timeout=STOP_TIMEOUT)
            if thread.is_alive():
                self.logger.debug("Watch for pod %r is still closing", name)

    def __watch(
        self,
        name: str,
        predicate: Predicate,
        deadline: float,
        watcher: Watch,
        cancelled: Event,
        result: Future,
    ) -> None:
        """Consume the watch stream until the predicate is met or the wait is cancelled.

        A stream closed by the server before the deadline is re-established.
        """
        try:
            while not cancelled.is_set():
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return
                stream = self.pods.watch(watcher, timeout=max(1, math.ceil(remaining)))
                with closing(stream):
                    for event in stream:
                        if cancelled.is_set():
                            return
                        pod = self.__evaluate(event, name, predicate)
                        if pod is not None:
                            self.__settle(result, pod=pod)
                            return
                self.logger.debug("Watch stream for pod %r closed by server", name)
        except WatchError as exception:
            self.__settle(result, exception=exception)
        except Exception as exception:  # pylint:disable=broad-except
            error = WatchError(f"watching pod {name!r}: {exception}")
            error.__cause__ = exception
            self.__settle(result, exception=error)

    @staticmethod
    def __evaluate(event: dict, name: str, predicate: Predicate) -> Optional[PodSchema]:
        """Evaluate a single watch event, returning the pod if it matches."""
        event_type = event.get("type")
        if event_type == "ERROR":
            raise WatchError(f"watch stream returned an error: {event.get('raw_object')}")
        if event_type not in WATCHED_EVENTS:
            return None
        resource = event["object"].to_dict()
        if resource.get("metadata", {}).get("name") != name:
            return None
        pod = PodSchema.model_validate(resource)
        if predicate(pod):
            return pod
        return None

    @staticmethod
    def __settle(
        result: Future,
        pod: Optional[PodSchema] = None,
        exception: Optional[Exception] = None,
    ) -> bool:
        """Resolve the result once. Any later attempt is ignored.

        Only the watch thread resolves the result.
        """
        if result.done():
            return False
        if exception is not None:
            result.set_exception(exception)
        else:
            result.set_result(pod)
        return True
