from tapes.application.interfaces.sources import ImageSource, InventorySource

__all__ = ["InventorySource", "ImageSource"]
