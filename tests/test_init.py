from tensor_accessor import *
import torch

def test_init():
    m = DenseTensor(torch.arange(20).reshape(4, 5))

    assert m[0].shape == (5,)
    assert m[1:3].shape == (2, 5)
    assert m[-1][-2:].tolist() == [18, 19]
    assert m.axis(1)[:-1].shape == (4, 4)

    m[0][0] = 100
    assert m[0][0].item() == 100

if __name__ == "__main__":
    test_init()
