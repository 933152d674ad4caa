from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

BuildName = Literal["debug", "dev", "release"]


class Target(BaseModel):
    model_config = ConfigDict(extra="ignore")

    Id: str
    Name: str | None = None
    Platform: str = "win32"
    Ip: str | None = None
    Port: int | None = None


class Project(BaseModel):
    model_config = ConfigDict(extra="ignore")

    Id: str | None = None
    Name: str | None = None
    SourceDirectory: str
    DataDirectoryBase: str | None = None
    MappedFolders: list[str] = Field(default_factory=list)


class ToolchainConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    Build: str = "dev"
    ProjectIndex: int = 0
    Targets: list[Target] = Field(default_factory=list)
    Projects: list[Project] = Field(default_factory=list)

    @property
    def current_project(self) -> Project | None:
        if 0 <= self.ProjectIndex < len(self.Projects):
            return self.Projects[self.ProjectIndex]

        return None


class LaunchCommand(BaseModel):
    executable: str
    arguments: list[str]

    @property
    def command(self) -> str:
        return " ".join(
            [quote_argument(self.executable)]
            + [quote_argument(argument) for argument in self.arguments]
        )


def quote_argument(argument: str) -> str:
    if " " in argument and not argument.startswith('"'):
        return f'"{argument}"'

    return argument
