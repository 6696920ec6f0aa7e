"""
Option repository implementation
"""

from typing import Any

from sqlmodel.ext.asyncio.session import AsyncSession

from taxoai.models.option import Option
from taxoai.repositories.base import BaseRepository


class OptionRepository(BaseRepository[Option]):
    def __init__(self, session: AsyncSession):
        super().__init__(Option, session)

    async def get_option(self, name: str, default: Any = None) -> Any:
        option = await self.get(name)
        return option.value if option is not None else default

    async def update_option(self, name: str, value: Any) -> None:
        option = await self.get(name)
        if option is None:
            option = Option(name=name, value=value)
        else:
            option.value = value
        await self.add(option)
