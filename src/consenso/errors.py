"""
Errores estructurales del núcleo.

Solo se levantan para input que el caller no puede ignorar. Los rangos
infeasibles y los conflictos se devuelven como datos, no como errores.

No heredan de ValueError para que pydantic no los envuelva en
ValidationError cuando se levantan desde un validator.
"""


class ConsensoError(Exception):
    """Error base del paquete."""


class InvalidCombineModeError(ConsensoError):
    """Modo de combinación desconocido."""

    def __init__(self, mode):
        self.mode = mode
        super().__init__(
            f"Modo de combinación no soportado: {mode!r}. Usar 'all', 'mixed' o 'strict'"
        )


class MissingOfferTypeError(ConsensoError):
    """Criterios sin el campo obligatorio offer_type."""

    def __init__(self, user_id=None):
        self.user_id = user_id
        detail = f" (user_id={user_id})" if user_id else ""
        super().__init__(f"Los criterios no tienen offer_type{detail}")
