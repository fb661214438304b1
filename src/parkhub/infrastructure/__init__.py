"""Infrastructure layer: persistence and partner service adapters"""
