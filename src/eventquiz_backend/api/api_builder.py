from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from eventquiz_backend.api.crud import create_db, get_id_db, list_db, update_db, delete_db
from typing import Annotated, Iterable, Optional
from eventquiz_backend.permissions.auth import get_current_principal
from eventquiz_backend.database import get_db
from eventquiz_backend.permissions.principal import Principal
from eventquiz_backend.interface.base import EntityInterface
from fastapi import FastAPI
from fastapi import Response

class CrudRouter:

    id_type = "id"

    path: str
    dto: EntityInterface

    def __init__(self, dto, endpoint: Optional[str] = None, operations: Optional[Iterable[str]] = None):
        self.dto = dto
        if endpoint == None:
            self.path = self.dto.endpoint
        else:
            self.path = endpoint

        self.operations = tuple(operations if operations != None else self.dto.operations)
        self.router = APIRouter()

    def create(self):
        async def route(principal: Annotated[Principal, Depends(get_current_principal)], entity: self.dto.create, db: Session = Depends(get_db)) -> self.dto.get:
            return await create_db(principal, db, entity, self.dto)
        return route

    def get(self):
        async def route(principal: Annotated[Principal, Depends(get_current_principal)], id: str, db: Session = Depends(get_db)) -> self.dto.get:
            return await get_id_db(principal, db, id, self.dto)
        return route

    def list(self):
        async def route(principal: Annotated[Principal, Depends(get_current_principal)], response: Response, params: self.dto.query = Depends(), db: Session = Depends(get_db)) -> list[self.dto.list]:
            list_result, total = await list_db(principal, db, params, self.dto)
            response.headers["X-Total-Count"] = str(total)
            return list_result
        return route

    def update(self):
        async def route(principal: Annotated[Principal, Depends(get_current_principal)], id: str, entity: self.dto.update, db: Session = Depends(get_db)) -> self.dto.get:
            return update_db(principal, db, id, entity, self.dto)
        return route

    def delete(self):
        async def route(principal: Annotated[Principal, Depends(get_current_principal)], id: str, db: Session = Depends(get_db)):
            return delete_db(principal, db, id, self.dto.model)
        return route

    def register_routes(self, app: FastAPI):

        scope_name = self.path.replace("/","").replace("-"," ")

        if "create" in self.operations:
            self.router.add_api_route("", self.create(), methods=["POST"],
                        status_code=status.HTTP_201_CREATED, name=f"create {scope_name}")
        if "get" in self.operations:
            self.router.add_api_route(f"/{{{CrudRouter.id_type}}}", self.get(), methods=["GET"],
                        status_code=status.HTTP_200_OK, name=f"get {scope_name}")
        if "list" in self.operations:
            self.router.add_api_route("", self.list(), methods=["GET"],
                        status_code=status.HTTP_200_OK, name=f"list {scope_name}")
        if "update" in self.operations:
            self.router.add_api_route(f"/{{{CrudRouter.id_type}}}", self.update(), methods=["PATCH"],
                        status_code=status.HTTP_200_OK, name=f"update {scope_name}")
        if "delete" in self.operations:
            self.router.add_api_route(f"/{{{CrudRouter.id_type}}}", self.delete(), methods=["DELETE"],
                        status_code=status.HTTP_200_OK, name=f"delete {scope_name}")

        app.include_router(
            self.router,
            prefix=f"/{self.path}",
            tags=[scope_name]
        )

        return self
