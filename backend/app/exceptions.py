class ContractLookupError(Exception):
    """Falha em uma chamada request/response ao serviço de contratos."""


class LookupTimeoutError(ContractLookupError):
    pass


class MalformedResponseError(ContractLookupError):
    pass


class ContractNotFoundError(ContractLookupError):
    def __init__(self, contract_id):
        self.contract_id = contract_id
        super().__init__(f"Contrato {contract_id} não encontrado")


class EventPublishError(Exception):
    pass


class ShiftGenerationError(Exception):
    pass


class ActorNotPermittedError(ShiftGenerationError):
    def __init__(self, actor_id):
        self.actor_id = actor_id
        super().__init__(f"Gestor {actor_id} não tem permissão para gerar turnos")


class TemplatesNotFoundError(ShiftGenerationError):
    pass
