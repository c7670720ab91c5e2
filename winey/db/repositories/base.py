from datetime import datetime
from typing import Any, Generic, Optional, Sequence, Type, TypeVar
from sqlmodel import SQLModel, Session

# Type générique pour le modèle (Game, Bottle, etc.)
ModelT = TypeVar("ModelT", bound=SQLModel)

class BaseRepository(Generic[ModelT]):
    """
    Repository de base pour les opérations CRUD standards.

    👉 Ne contient aucune logique métier.
    👉 Gère la persistance générique : create, read, update, delete.
    👉 Les repositories concrets définissent `model = MaClasseSQLModel`.
    """

    model: Type[ModelT]

    def __init__(self, session: Session):
        self.session = session

    # ---------- READ ----------

    def get(self, id_: Any) -> Optional[ModelT]:
        """Retourne un enregistrement par son identifiant, ou None."""
        return self.session.get(self.model, id_)

    # ---------- CREATE ----------

    def create(self, *, commit: bool = True, **fields) -> ModelT:
        """
        Crée et persiste un nouvel enregistrement.
        commit=False permet d'orchestrer une transaction globale au niveau service.
        """
        entity = self.model(**fields)
        self.session.add(entity)
        if commit:
            self.session.commit()
            self.session.refresh(entity)
        else:
            # flush pour obtenir l'ID sans commit (utile pour FKs)
            self.session.flush()
        return entity

    def add_all(self, entities: Sequence[ModelT], *, commit: bool = True) -> Sequence[ModelT]:
        """Persiste des entités déjà construites (ex: entités validées avant insertion)."""
        self.session.add_all(entities)
        if commit:
            self.session.commit()
            for entity in entities:
                self.session.refresh(entity)
        else:
            self.session.flush()
        return entities

    # ---------- UPDATE ----------

    def update(self, entity: ModelT, *, commit: bool = True, **changes) -> ModelT:
        """
        Met à jour un enregistrement existant.
        commit=False permet d'orchestrer une transaction globale au niveau service.
        """
        for key, value in changes.items():
            setattr(entity, key, value)
        if hasattr(entity, "updated_at"):
            entity.updated_at = datetime.utcnow()
        self.session.add(entity)
        if commit:
            self.session.commit()
            self.session.refresh(entity)
        else:
            self.session.flush()
        return entity

    # ---------- DELETE ----------

    def delete(self, entity: ModelT, *, commit: bool = True) -> None:
        """
        Supprime un enregistrement.
        commit=False permet d'orchestrer une transaction globale au niveau service.
        """
        self.session.delete(entity)
        if commit:
            self.session.commit()
        else:
            self.session.flush()
