from decimal import Decimal
from typing import Annotated

from pydantic import Field

# Positivo, finito y con 2 decimales como máximo
Amount = Annotated[Decimal, Field(gt=0, max_digits=14, decimal_places=2)]
Money = Annotated[Decimal, Field(max_digits=14, decimal_places=2)]
