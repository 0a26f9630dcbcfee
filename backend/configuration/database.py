from typing import NamedTuple
from functools import lru_cache
from azure.cosmos import CosmosClient, ContainerProxy, DatabaseProxy
from azure.identity import DefaultAzureCredential
from backend.configuration.config import Config


@lru_cache(maxsize=1)
def get_database() -> DatabaseProxy:
    """
    Create the Cosmos client on first use and return the database reference.
    Deferred so that importing the routers does not require a live account.
    """
    credential = DefaultAzureCredential()
    client = CosmosClient(
        url=Config.COSMOSDB_ENDPOINT,
        credential=credential
    )
    return client.get_database_client(Config.COSMOSDB_DATABASE_NAME)

def get_container(container_key: str) -> ContainerProxy:
    """
    Dependency that provides the CosmosDB container client
    Args:
        container_key (str): Key of the container to get (users, availabilities, etc.)
    Returns:
        Container client for the specified container
    """
    if container_key not in Config.COSMOSDB_CONTAINER_NAME:
        raise ValueError(f"Container {container_key} not found")
    return get_database().get_container_client(Config.COSMOSDB_CONTAINER_NAME[container_key])

def get_availabilities_container() -> ContainerProxy:
    return get_container("availabilities")

def get_exceptions_container() -> ContainerProxy:
    return get_container("exceptions")


class ScheduleContainers(NamedTuple):
    """Every container the schedule builder and free-slot finder read from."""
    users: ContainerProxy
    availabilities: ContainerProxy
    exceptions: ContainerProxy
    classes: ContainerProxy
    sessions: ContainerProxy


def get_schedule_containers() -> ScheduleContainers:
    """Dependency injection function for the schedule endpoints."""
    return ScheduleContainers(
        users=get_container("users"),
        availabilities=get_container("availabilities"),
        exceptions=get_container("exceptions"),
        classes=get_container("classes"),
        sessions=get_container("sessions")
    )
