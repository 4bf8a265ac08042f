"""CHIP-8 stack operations."""

import jax.numpy as jnp
from chip8core.state import StackState


def push(stack: StackState, address: jnp.ndarray) -> tuple[StackState, jnp.ndarray]:
    """Push address onto stack.

    Returns:
        Tuple of (stack, overflow). On overflow the stack is left unchanged.
    """
    overflow = stack.pointer >= stack.data.shape[0]
    index = jnp.where(overflow, 0, stack.pointer)
    new_data = jnp.where(overflow, stack.data, stack.data.at[index].set(jnp.astype(address, jnp.uint16)))
    new_pointer = jnp.where(overflow, stack.pointer, stack.pointer + 1)
    return stack.replace(data=new_data, pointer=new_pointer), overflow


def pop(stack: StackState) -> tuple[StackState, jnp.ndarray, jnp.ndarray]:
    """Pop address from stack.

    Returns:
        Tuple of (stack, address, underflow). On underflow the stack is left
        unchanged and the address is 0.
    """
    underflow = stack.pointer <= 0
    new_pointer = jnp.where(underflow, stack.pointer, stack.pointer - 1)
    popped_address = jnp.where(underflow, jnp.zeros((), jnp.uint16), stack.data[new_pointer])
    new_data = stack.data.at[new_pointer].set(jnp.where(underflow, stack.data[new_pointer], 0))
    return stack.replace(data=new_data, pointer=new_pointer), popped_address, underflow


def depth(stack: StackState) -> jnp.ndarray:
    """Number of return addresses currently on the stack."""
    return stack.pointer
