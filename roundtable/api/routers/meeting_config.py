"""
Meeting configuration API endpoints

Read-only listing of agents, output styles and workflows
"""
from fastapi import APIRouter, Depends, HTTPException
from typing import List

from ..models.meeting_config import Agent, MeetingWorkflow, OutputStyle
from ..services.meeting_config_service import MeetingConfigService
from ..services.meeting_services import get_meeting_config_service

router = APIRouter(prefix="/api", tags=["meeting-config"])


def get_config_service() -> MeetingConfigService:
    """Dependency injection: get meeting configuration service instance"""
    return get_meeting_config_service()


@router.get("/agents", response_model=List[Agent])
async def list_agents(service: MeetingConfigService = Depends(get_config_service)):
    """Get all agents"""
    return await service.get_agents()


@router.get("/agents/{agent_id}", response_model=Agent)
async def get_agent(agent_id: str, service: MeetingConfigService = Depends(get_config_service)):
    """Get agent details"""
    agent = await service.get_agent(agent_id)
    if not agent:
        raise HTTPException(status_code=404, detail=f"Agent '{agent_id}' not found")
    return agent


@router.get("/styles", response_model=List[OutputStyle])
async def list_output_styles(service: MeetingConfigService = Depends(get_config_service)):
    """Get all output styles"""
    return await service.get_output_styles()


@router.get("/workflows", response_model=List[MeetingWorkflow])
async def list_workflows(
    enabled_only: bool = False,
    service: MeetingConfigService = Depends(get_config_service)
):
    """Get all workflows"""
    return await service.get_workflows(enabled_only=enabled_only)


@router.get("/workflows/{workflow_id}", response_model=MeetingWorkflow)
async def get_workflow(workflow_id: str, service: MeetingConfigService = Depends(get_config_service)):
    """Get workflow details"""
    workflow = await service.get_workflow(workflow_id)
    if not workflow:
        raise HTTPException(status_code=404, detail=f"Workflow '{workflow_id}' not found")
    return workflow
