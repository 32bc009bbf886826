from abc import ABC
from typing import TypeVar, Generic, Optional, List, Any, Type
from sqlalchemy.orm import Session
from pydantic import BaseModel

T = TypeVar("T")
SchemaType = TypeVar("SchemaType", bound=BaseModel)
LIKE_ESCAPE = "\\"


def like_pattern(keyword: str) -> str:
    """부분 일치 패턴 - 사용자 입력의 % _ 는 문자 그대로 검색"""
    escaped = (
        keyword.strip().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    )
    return f"%{escaped}%"


class BaseRepository(Generic[T, SchemaType], ABC):
    """
    모든 리포지토리의 베이스 클래스 - Pydantic 응답 보장

    리포지토리는 commit하지 않는다. flush까지만 수행하고,
    트랜잭션 경계(commit/rollback)는 서비스의 세션 스코프가 결정한다.
    """

    def __init__(
        self, model_class: Type[T], schema_class: Type[SchemaType], db: Session
    ):
        self.model_class = model_class
        self.schema_class = schema_class
        self.db = db

    def _to_schema(self, model_instance: Any) -> Optional[SchemaType]:
        """SQLAlchemy 모델을 Pydantic 스키마로 변환"""
        if model_instance is None:
            return None
        return self.schema_class.model_validate(model_instance)

    def _to_schemas(self, model_instances: List[Any]) -> List[SchemaType]:
        results = []
        for instance in model_instances:
            schema_instance = self._to_schema(instance)
            if schema_instance is not None:
                results.append(schema_instance)
        return results

    def get_model(self, id: Any) -> Optional[T]:
        """ID로 ORM 인스턴스 조회 (워크플로우 내부 수정용)"""
        return self.db.get(self.model_class, id)

    def get_by_id(self, id: Any) -> Optional[SchemaType]:
        """ID로 조회 - Pydantic 스키마 반환"""
        return self._to_schema(self.get_model(id))

    def create(self, **kwargs) -> T:
        """새 레코드 생성 - flush 후 생성된 ORM 인스턴스 반환 (ID 할당됨)"""
        instance = self.model_class(**kwargs)
        self.db.add(instance)
        self.db.flush()
        return instance

    def update(self, instance_id: Any, **kwargs) -> Optional[T]:
        """레코드 업데이트 - 존재하지 않으면 None"""
        instance = self.get_model(instance_id)
        if not instance:
            return None

        for key, value in kwargs.items():
            if hasattr(instance, key):
                setattr(instance, key, value)

        self.db.flush()
        return instance

    def delete(self, instance_id: Any) -> bool:
        """레코드 삭제"""
        instance = self.get_model(instance_id)
        if not instance:
            return False
        self.db.delete(instance)
        self.db.flush()
        return True

    def count(self) -> int:
        """레코드 수 조회"""
        return self.db.query(self.model_class).count()
