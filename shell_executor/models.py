from pydantic import BaseModel, ConfigDict, Field


class PluginInfo(BaseModel):
    id: str
    name: str
    description: str


class ExecuteResponse(BaseModel):
    success: bool
    message: str


class ConfigurationPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    script_content: str = Field(alias="scriptContent")
