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
"""Configuration of patient pods."""
from .config import Config
from .kubernetes.schemas import Container, EnvVar, OwnerReference, Pod

POD_DNS_SUFFIX = "default.pod.cluster.local"
PATIENT_PORT = 8080
PATIENT_SUFFIX = "-patient"
PATIENT_CONTAINER = "patient"


def pod_sd_hostname(ip: str) -> str:
    """Return the FQDN to reach a pod directly via the cluster DNS.

    The address is not validated, a malformed IP gives a malformed hostname.

    :param ip: IP address of the pod, e.g. 10.22.33.4
    :return: Hostname, e.g. 10-22-33-4.default.pod.cluster.local
    """
    return f"{ip.replace('.', '-')}.{POD_DNS_SUFFIX}"


def configure_pod(pod: Pod, parent: Pod, config: Config) -> Pod:
    """Set all attributes required to create a patient pod.

    The pod is modified in place, the same object is returned.

    :param pod: Pod decoded from the template.
    :param parent: The pod that the spawner runs in.
    :param config: Spawner configuration.
    :return: The configured pod.
    """
    parent_ip = parent.status.podIP if parent.status is not None else None
    parent_ip = parent_ip or ""

    pod.metadata.name = f"{parent.metadata.name}{PATIENT_SUFFIX}"
    pod.metadata.ownerReferences = [
        OwnerReference(
            apiVersion="v1",
            kind="Pod",
            name=parent.metadata.name,
            uid=parent.metadata.uid or "",
        )
    ]

    if len(pod.spec.containers) == 0:
        pod.spec.containers = [Container(name=PATIENT_CONTAINER, args=[PATIENT_CONTAINER])]

    container = pod.spec.containers[0]
    if not container.name:
        container.name = PATIENT_CONTAINER
    container.image = config.patient_image
    container.env = [
        EnvVar(name="KUBENURSE_DIRECT_URL", value=f"http://{parent_ip}:{PATIENT_PORT}"),
        EnvVar(
            name="KUBENURSE_DNS_URL",
            value=f"http://{pod_sd_hostname(parent_ip)}:{PATIENT_PORT}",
        ),
        EnvVar(name="KUBENURSE_INGRESS_URL", value=config.ingress_url),
        EnvVar(name="KUBENURSE_SERVICE_URL", value=config.service_url),
    ]
    return pod
