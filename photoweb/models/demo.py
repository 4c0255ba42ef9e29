from pydantic import BaseModel


class DemoRecord(BaseModel):
    age: int
    name: str
    sex: bool


DEMO_RECORD = DemoRecord(age=12, name="Afra", sex=True)
