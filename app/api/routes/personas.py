from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from app.api.dependencies import get_db
from app.api.security import get_current_user_id
from app.schemas.persona_schema import PersonaRequest, PersonaResponse
from app.services.chat_store import ChatStore


router = APIRouter()


@router.get("/", response_model=list[PersonaResponse])
def list_personas(
    q: Optional[str] = Query(default=None, description="Case-insensitive name filter"),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return ChatStore(db, user_id).list_personas(search=q)


@router.post("/", response_model=PersonaResponse)
def create_persona(
    request: PersonaRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return ChatStore(db, user_id).create_persona(name=request.name, instructions=request.instructions)


@router.put("/{persona_id}", response_model=PersonaResponse)
def update_persona(
    persona_id: str,
    request: PersonaRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    persona = ChatStore(db, user_id).update_persona(
        persona_id, name=request.name, instructions=request.instructions
    )
    if not persona:
        raise HTTPException(status_code=404, detail="Persona not found")
    return persona


@router.delete("/{persona_id}", status_code=204)
def delete_persona(
    persona_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    if not ChatStore(db, user_id).delete_persona(persona_id):
        raise HTTPException(status_code=404, detail="Persona not found")
    return Response(status_code=204)
