from sqlalchemy import Column, String, Boolean, Date, DateTime, Uuid, Index
from sqlalchemy.sql import func
from app.database import Base


class ShiftTemplate(Base):
    """
    Registro local dos modelos de turno de cada contrato.

    A definição completa da recorrência (horários, dias da semana,
    feriados, locais) pertence ao serviço de contratos e é buscada a cada
    geração. Aqui fica apenas o vínculo modelo -> contrato, usado pelo job
    diário para descobrir contratos candidatos e pelo gatilho manual.
    O id é o mesmo id do modelo no serviço de contratos.
    """
    __tablename__ = "shift_templates"

    id = Column(Uuid, primary_key=True)
    contract_id = Column(Uuid, nullable=True, index=True)

    template_code = Column(String(50), nullable=True)
    template_name = Column(String(200), nullable=False)

    effective_from = Column(Date, nullable=True)
    effective_to = Column(Date, nullable=True)

    is_active = Column(Boolean, default=True, nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("ix_shift_templates_contract_active", "contract_id", "is_active"),
    )
