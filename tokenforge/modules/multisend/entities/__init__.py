from tokenforge.modules.multisend.entities.multisend_entity import MultisendEntity

__all__ = ["MultisendEntity"]
