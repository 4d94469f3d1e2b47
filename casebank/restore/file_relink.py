import structlog

from casebank.core.constants import FILE_AREAS
from casebank.integrations.files.base import FileRelinker
from casebank.restore.id_mapping import IdMappingStore

logger = structlog.get_logger()


async def relink_files(relinker: FileRelinker, id_maps: IdMappingStore) -> dict[str, int]:
    """Hand every file area its kind's complete mapping, including empty ones."""
    moved: dict[str, int] = {}
    for kind, file_area in FILE_AREAS:
        mapping = id_maps.published(kind)
        count = await relinker.relink(kind, file_area, mapping)
        moved[file_area] = count
        logger.info("files_relinked", kind=kind.value, file_area=file_area, mapped=len(mapping), moved=count)
    return moved
