"""
Pydantic models for AL Graph API responses and JSON export.

Optional values serialize as null and empty sequences as [], so consumers
can tell an absent return type or formula apart from an empty one.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from algraph.ir import (
    ALObject,
    DerivedField,
    Event,
    Extension,
    Field,
    Integration,
    Parameter,
    Procedure,
    ProjectAnalysis,
)


class ParameterModel(BaseModel):
    name: str
    type: str
    isVar: bool

    @classmethod
    def from_ir(cls, parameter: Parameter) -> "ParameterModel":
        return cls(name=parameter.name, type=parameter.type, isVar=parameter.is_var)


class ProcedureModel(BaseModel):
    name: str
    parameters: list[ParameterModel]
    returnType: Optional[str] = None
    isEvent: bool = False
    eventType: Optional[str] = None
    isLocal: bool = False

    @classmethod
    def from_ir(cls, procedure: Procedure) -> "ProcedureModel":
        return cls(
            name=procedure.name,
            parameters=[ParameterModel.from_ir(parameter) for parameter in procedure.parameters],
            returnType=procedure.return_type,
            isEvent=procedure.is_event,
            eventType=procedure.event_role.value if procedure.event_role else None,
            isLocal=procedure.is_local,
        )


class FieldModel(BaseModel):
    id: int
    name: str
    type: str
    isFlowfield: bool = False
    calcFormula: Optional[str] = None

    @classmethod
    def from_ir(cls, field_ir: Field) -> "FieldModel":
        return cls(
            id=field_ir.field_id,
            name=field_ir.name,
            type=field_ir.type,
            isFlowfield=field_ir.is_flowfield,
            calcFormula=field_ir.calc_formula,
        )


class ObjectModel(BaseModel):
    type: str
    id: int
    name: str
    extends: Optional[str] = None
    fields: list[FieldModel]
    procedures: list[ProcedureModel]

    @classmethod
    def from_ir(cls, obj: ALObject) -> "ObjectModel":
        return cls(
            type=obj.kind.value,
            id=obj.object_id,
            name=obj.name,
            extends=obj.extends,
            fields=[FieldModel.from_ir(field_ir) for field_ir in obj.fields],
            procedures=[ProcedureModel.from_ir(procedure) for procedure in obj.procedures],
        )


class EventModel(BaseModel):
    name: str
    eventType: str
    objectType: str
    objectName: str
    parameters: list[ParameterModel]

    @classmethod
    def from_ir(cls, event: Event) -> "EventModel":
        return cls(
            name=event.name,
            eventType=event.role.value,
            objectType=event.object_kind.value,
            objectName=event.object_name,
            parameters=[ParameterModel.from_ir(parameter) for parameter in event.parameters],
        )


class FlowfieldModel(BaseModel):
    name: str
    tableName: str
    calcMethod: str
    sourceTable: Optional[str] = None
    sourceField: Optional[str] = None

    @classmethod
    def from_ir(cls, flowfield: DerivedField) -> "FlowfieldModel":
        return cls(
            name=flowfield.name,
            tableName=flowfield.table_name,
            calcMethod=flowfield.calc_method.value,
            sourceTable=flowfield.source_table,
            sourceField=flowfield.source_field,
        )


class ExtensionModel(BaseModel):
    name: str
    filePath: str
    objects: list[ObjectModel]
    events: list[EventModel]
    flowfields: list[FlowfieldModel]
    dependencies: list[str]
    sourceCode: Optional[str] = None

    @classmethod
    def from_ir(cls, extension: Extension, *, include_source: bool = True) -> "ExtensionModel":
        return cls(
            name=extension.name,
            filePath=extension.path,
            objects=[ObjectModel.from_ir(obj) for obj in extension.objects],
            events=[EventModel.from_ir(event) for event in extension.events],
            flowfields=[FlowfieldModel.from_ir(flowfield) for flowfield in extension.flowfields],
            dependencies=list(extension.dependencies),
            sourceCode=extension.source if include_source else None,
        )


class IntegrationModel(BaseModel):
    source: str
    target: str
    type: str
    description: str
    count: int = 1

    @classmethod
    def from_ir(cls, integration: Integration) -> "IntegrationModel":
        return cls(
            source=integration.source,
            target=integration.target,
            type=integration.kind.value,
            description=integration.description,
        )


class ProjectAnalysisModel(BaseModel):
    extensions: list[ExtensionModel]
    dependencies: list[str]
    crossModuleIntegrations: list[IntegrationModel]
    failedPaths: list[str]

    @classmethod
    def from_ir(cls, analysis: ProjectAnalysis, *, include_source: bool = False) -> "ProjectAnalysisModel":
        return cls(
            extensions=[
                ExtensionModel.from_ir(extension, include_source=include_source)
                for extension in analysis.extensions
            ],
            dependencies=list(analysis.dependencies),
            crossModuleIntegrations=[IntegrationModel.from_ir(item) for item in analysis.integrations],
            failedPaths=list(analysis.failed_paths),
        )


class AnalyzeRequest(BaseModel):
    name: str
    source: str


class ObjectRef(BaseModel):
    id: str
    name: str
    kind: str
    extension: str


class ProcedureRef(BaseModel):
    id: str
    name: str
    objectName: str
    eventRole: Optional[str] = None


class IntegrationsResponse(BaseModel):
    extension: str
    outgoing: list[IntegrationModel]
    incoming: list[IntegrationModel]


class EventLinksResponse(BaseModel):
    event: str
    publishers: list[ProcedureRef]
    subscribers: list[ProcedureRef]


class ObjectExtensionsResponse(BaseModel):
    base: str
    extensions: list[ObjectRef]
