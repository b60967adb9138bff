"""
The resource controller: the lifecycle of the workloads of one collection.

Usage::

    import kready

    async def main() -> None:
        info = kready.resolve()
        async with kready.APIContext(info) as context:
            controller = kready.ResourceController(context)
            url = await controller.create('echo', 'docker.io/example/echo', timeout=60)
            await controller.wait_for_ready('echo', timeout=300)
            print(f"{url} is ready")

All the operations raise `APIError` for non-2xx responses (with the status
and the body preserved), `TransportError` for the network & TLS failures,
and `ParseError` for the malformed statuses. The waiting operations also
raise `PollingTimeoutError` and `PollingStoppedError`.
"""
import asyncio
import logging
from typing import Any, AsyncIterator, List, Mapping, Optional

from kready._cogs.clients import auth, creating, deleting, fetching, patching, watching
from kready._cogs.configs import configuration
from kready._cogs.structs import bodies, references, statuses
from kready._core.actions import loggers
from kready._core.engines import readiness

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = 'default'


class ResourceController:
    """
    Create, delete, inspect, and await the objects of one resource collection.

    The controller owns nothing but the references: the API context is created
    and closed by the caller, and can be shared by several controllers.
    """

    def __init__(
            self,
            context: auth.APIContext,
            resource: references.Resource = references.KNATIVE_SERVICES,
            *,
            namespace: Optional[str] = None,
            settings: Optional[configuration.ClientSettings] = None,
    ) -> None:
        super().__init__()
        self.context = context
        self.resource = resource
        self.settings = settings if settings is not None else context.settings
        self._namespace = namespace

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__}: {self.resource!r} in {self.namespace!r}>'

    @property
    def namespace(self) -> str:
        # Evaluated on every call: the credentials can be reloaded with another namespace.
        return self._namespace or self.context.default_namespace or DEFAULT_NAMESPACE

    def get_ref(self, name: str) -> references.ObjectReference:
        return references.ObjectReference(resource=self.resource, namespace=self.namespace, name=name)

    async def create(
            self,
            name: str,
            image: str,
            *,
            timeout: Optional[float] = None,
            stopper: Optional[asyncio.Event] = None,
    ) -> str:
        """
        Create a workload of the image and wait until its URL is assigned.

        Returns the URL (as ``https://`` unless configured otherwise).
        """
        ref = self.get_ref(name)
        object_logger = loggers.ObjectLogger(ref=ref)
        body = bodies.build_manifest(self.resource, name=name, image=image)
        await creating.create_obj(context=self.context, resource=self.resource,
                                  namespace=ref.namespace, body=body, logger=object_logger)
        object_logger.info(f"Requested the creation with the image {image!r}.")

        return await readiness.wait_for_url(
            context=self.context,
            ref=ref,
            settings=self.settings,
            timeout=timeout if timeout is not None else self.settings.polling.creation_timeout,
            stopper=stopper,
            logger=object_logger,
        )

    async def delete(self, name: str) -> None:
        """
        Delete the workload; `APINotFoundError` (404) if it is already absent.
        """
        ref = self.get_ref(name)
        object_logger = loggers.ObjectLogger(ref=ref)
        await deleting.delete_obj(context=self.context, ref=ref, logger=object_logger)
        object_logger.info("Requested the deletion.")

    async def patch(self, name: str, patch: Mapping[str, Any]) -> bodies.RawBody:
        ref = self.get_ref(name)
        object_logger = loggers.ObjectLogger(ref=ref)
        return await patching.patch_obj(context=self.context, ref=ref, patch=patch,
                                        logger=object_logger)

    async def read_status(self, name: str) -> statuses.ResourceStatus:
        ref = self.get_ref(name)
        object_logger = loggers.ObjectLogger(ref=ref)
        return await readiness.fetch_status(context=self.context, ref=ref, logger=object_logger)

    async def get_status(self, name: str) -> bool:
        """
        Check if the workload is ready now. The absent status means "not ready".
        """
        status = await self.read_status(name)
        return status.ready

    async def wait_for_ready(
            self,
            name: str,
            *,
            timeout: Optional[float] = None,
            stopper: Optional[asyncio.Event] = None,
    ) -> None:
        ref = self.get_ref(name)
        object_logger = loggers.ObjectLogger(ref=ref)
        await readiness.wait_for_ready(
            context=self.context,
            ref=ref,
            settings=self.settings,
            timeout=timeout if timeout is not None else self.settings.polling.readiness_timeout,
            stopper=stopper,
            logger=object_logger,
        )

    async def list(self) -> List[bodies.RawBody]:
        items, _ = await fetching.list_objs(context=self.context, resource=self.resource,
                                            namespace=self.namespace, logger=logger)
        return items

    async def watch(
            self,
            *,
            resource_version: Optional[str] = None,
            timeout_seconds: Optional[int] = None,
    ) -> AsyncIterator[bodies.RawEvent]:
        """
        Stream the changes of the collection until the server closes the stream.
        """
        async for raw_event in watching.watch_objs(context=self.context, resource=self.resource,
                                                   namespace=self.namespace,
                                                   resource_version=resource_version,
                                                   timeout_seconds=timeout_seconds,
                                                   logger=logger):
            yield raw_event
